"""Fallback strategy: one forward pass over normalized lines.

Used when the response carries no usable separators. Markers may appear
anywhere in a line; a question marker closes the pending card.
"""
from __future__ import annotations

from typing import List

from .markers import MarkerKind, find_marker
from .models import FlashcardCandidate
from .state import ParserState


def scan_lines(normalized_text: str, question_limit: int) -> List[FlashcardCandidate]:
    cards: List[FlashcardCandidate] = []
    state = ParserState(question_limit=question_limit)

    def flush() -> None:
        card = state.to_candidate()
        if card is not None:
            cards.append(card)

    for raw in normalized_text.splitlines():
        line = raw.strip()
        if not line:
            continue
        marker = find_marker(line)
        if marker is None:
            state.absorb(line)
        elif marker.kind is MarkerKind.QUESTION:
            if state.is_complete():
                flush()
            state.start_question(marker.remainder)
        else:
            state.start_answer(marker.remainder)

    flush()
    return cards
