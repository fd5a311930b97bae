"""Separator-based strategy: split the response into blocks, one card per block."""
from __future__ import annotations

from typing import List, Optional

from .markers import MarkerKind, match_prefix
from .models import FlashcardCandidate
from .state import ParserState


def split_sections(text: str, separator: str) -> List[str]:
    if separator not in text:
        return []
    return [section for section in text.split(separator) if section.strip()]


def _lines(section: str) -> List[str]:
    return [line.strip() for line in section.splitlines() if line.strip()]


def extract_block(section: str, question_limit: int) -> Optional[FlashcardCandidate]:
    """Pull a single question/answer pair out of one block.

    Markers must open the line. Only the first question marker that carries
    text is honoured; later ones are ordinary text for the block.
    """
    state = ParserState(question_limit=question_limit)
    for line in _lines(section):
        marker = match_prefix(line)
        if marker and marker.kind is MarkerKind.QUESTION and not state.question:
            state.set_question(marker.remainder)
        elif marker and marker.kind is MarkerKind.ANSWER:
            state.start_answer(marker.remainder)
        else:
            state.absorb(line)
    return state.to_candidate()


def extract_by_separator(text: str, separator: str, question_limit: int) -> List[FlashcardCandidate]:
    cards: List[FlashcardCandidate] = []
    for section in split_sections(text, separator):
        card = extract_block(section, question_limit)
        if card is not None:
            cards.append(card)
    return cards
