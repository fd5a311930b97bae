from typing import List, Optional

from pydantic import BaseModel, Field


class Flashcard(BaseModel):
    id: int
    deck_id: int
    question: str
    answer: str
    created_at: str


class Deck(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: str
    flashcards: List[Flashcard] = Field(default_factory=list)
