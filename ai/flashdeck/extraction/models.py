from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class FlashcardCandidate(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class ExtractionStrategy(str, Enum):
    SEPARATOR = 'separator'
    LINE_SCAN = 'line_scan'
    KEYWORD_SPLIT = 'keyword_split'
    NONE = 'none'


class ExtractionResult(BaseModel):
    flashcards: List[FlashcardCandidate] = Field(default_factory=list)
    strategy: ExtractionStrategy = ExtractionStrategy.NONE
    total_found: int = 0
    truncated: bool = False
