import re

_EMPHASIS_RE = re.compile(r'^\*+\s*')
_ORDINAL_RE = re.compile(r'^\d+[.)]\s*')
_BULLET_RE = re.compile(r'^[-*•+]\s*')


def _strip_once(line: str) -> str:
    # emphasis first: markers can wrap numbering ("**1. Question")
    line = _EMPHASIS_RE.sub('', line.lstrip(), count=1)
    line = _ORDINAL_RE.sub('', line, count=1)
    return _BULLET_RE.sub('', line, count=1)


def normalize_line(line: str) -> str:
    """Drop leading emphasis, numbering and bullets until none is left."""
    current = line.lstrip()
    while True:
        stripped = _strip_once(current)
        if stripped == current:
            return current
        current = stripped


def normalize(text: str) -> str:
    """Normalize every line of ``text``; line count and order are preserved."""
    return '\n'.join(normalize_line(line) for line in text.split('\n'))
