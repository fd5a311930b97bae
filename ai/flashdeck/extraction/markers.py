"""Question/answer keyword markers recognised in model output.

Markers are kept as an ordered table of (tag, kind) pairs; within a kind the
more specific tag comes first, so "QUESTION:" wins over "Q:" on the same line.
Matching is case-insensitive.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple, Optional, Tuple


class MarkerKind(str, Enum):
    QUESTION = 'question'
    ANSWER = 'answer'


MARKERS: Tuple[Tuple[str, MarkerKind], ...] = (
    ('QUESTION:', MarkerKind.QUESTION),
    ('Q:', MarkerKind.QUESTION),
    ('ANSWER:', MarkerKind.ANSWER),
    ('A:', MarkerKind.ANSWER),
)

_PATTERNS = tuple((re.compile(re.escape(tag), re.IGNORECASE), tag, kind) for tag, kind in MARKERS)


class MarkerMatch(NamedTuple):
    kind: MarkerKind
    tag: str
    remainder: str


def match_prefix(line: str) -> Optional[MarkerMatch]:
    """Match a marker at the very start of ``line``."""
    for pattern, tag, kind in _PATTERNS:
        m = pattern.match(line)
        if m:
            return MarkerMatch(kind, tag, line[m.end():].strip())
    return None


def find_marker(line: str) -> Optional[MarkerMatch]:
    """Find a marker anywhere in ``line``.

    Question markers are looked for before answer markers; the remainder is
    whatever follows the first occurrence of the winning tag. Tags match
    inside words too, so "Data:" reads as "A:".
    """
    for pattern, tag, kind in _PATTERNS:
        m = pattern.search(line)
        if m:
            return MarkerMatch(kind, tag, line[m.end():].strip())
    return None
