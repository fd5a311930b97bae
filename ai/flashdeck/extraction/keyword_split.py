from __future__ import annotations

import re
from typing import List

from .models import FlashcardCandidate

# case-sensitive on purpose; longer tokens first
KEYWORD_TOKENS = ('Question:', 'Answer:', 'Q:', 'A:')
_KEYWORD_RE = re.compile('|'.join(re.escape(token) for token in KEYWORD_TOKENS))


def split_by_keywords(text: str) -> List[FlashcardCandidate]:
    """Last resort: split on the keyword tokens and pair consecutive fragments."""
    fragments = [f.strip() for f in _KEYWORD_RE.split(text) if f.strip()]
    cards: List[FlashcardCandidate] = []
    # a trailing unpaired fragment is dropped by the range bound
    for i in range(0, len(fragments) - 1, 2):
        cards.append(FlashcardCandidate(question=fragments[i], answer=fragments[i + 1]))
    return cards
