from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, PositiveInt


def _env_optional_int(name: str, default: str) -> Optional[int]:
    raw = os.getenv(name, default).strip().lower()
    if raw in ('', 'none', '0', 'unbounded'):
        return None
    return int(raw)


FLASHCARD_SEPARATOR = os.getenv('FLASHCARD_SEPARATOR', '<<<END>>>')
FLASHCARD_QUESTION_LIMIT = int(os.getenv('FLASHCARD_QUESTION_LIMIT', '200'))
FLASHCARD_MAX_COUNT = _env_optional_int('FLASHCARD_MAX_COUNT', '20')
FLASHCARD_KEYWORD_SPLIT_FALLBACK = os.getenv('FLASHCARD_KEYWORD_SPLIT_FALLBACK', 'true').lower() in ('1', 'true', 'yes')


class ExtractionConfig(BaseModel):
    """Tunable knobs shared by every extraction strategy.

    separator: token the generation prompt asks the model to put between cards.
    question_limit: a question shorter than this keeps absorbing untagged
        continuation lines; at or beyond it, such lines go to the answer.
    max_flashcards: cap on returned cards (ordered prefix); None is unbounded.
    keyword_split_fallback: run the keyword-split strategy as last resort.
    """

    separator: str = Field(default_factory=lambda: FLASHCARD_SEPARATOR, min_length=1)
    question_limit: int = Field(default_factory=lambda: FLASHCARD_QUESTION_LIMIT, ge=1)
    max_flashcards: Optional[PositiveInt] = Field(default_factory=lambda: FLASHCARD_MAX_COUNT)
    keyword_split_fallback: bool = Field(default_factory=lambda: FLASHCARD_KEYWORD_SPLIT_FALLBACK)
