"""Extraction pipeline: raw model output -> ordered, capped flashcards.

Strategies run in fixed precedence and each one only when the previous
produced nothing:

1. explicit separator blocks (the prompt asks the model for them)
2. normalization + line scanning
3. keyword splitting (when enabled)

The pipeline never raises for bad input; an empty list means nothing could
be extracted.
"""
from __future__ import annotations

from typing import Any, List, Optional

from flashdeck.utils import get_logger, log_flashcard_extraction

from .config import ExtractionConfig
from .keyword_split import split_by_keywords
from .line_scanner import scan_lines
from .models import ExtractionResult, ExtractionStrategy, FlashcardCandidate
from .normalizer import normalize
from .section_splitter import extract_by_separator

LOG = get_logger()


def _coerce_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode('utf-8', errors='replace')
    return ''


class ExtractionPipeline:
    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()

    def _run_strategies(self, text: str):
        cfg = self.config
        cards = extract_by_separator(text, cfg.separator, cfg.question_limit)
        if cards:
            return cards, ExtractionStrategy.SEPARATOR
        LOG.debug('separator_strategy_empty', extra={'separator': cfg.separator})

        cards = scan_lines(normalize(text), cfg.question_limit)
        if cards:
            return cards, ExtractionStrategy.LINE_SCAN
        LOG.debug('line_scan_strategy_empty')

        if cfg.keyword_split_fallback:
            cards = split_by_keywords(text)
            if cards:
                return cards, ExtractionStrategy.KEYWORD_SPLIT
        return [], ExtractionStrategy.NONE

    def extract(self, raw_response: Any) -> ExtractionResult:
        text = _coerce_text(raw_response)
        if not text.strip():
            return ExtractionResult()

        cards, strategy = self._run_strategies(text)
        limit = self.config.max_flashcards
        capped = cards[:limit] if limit is not None else cards
        result = ExtractionResult(
            flashcards=capped,
            strategy=strategy,
            total_found=len(cards),
            truncated=len(capped) < len(cards),
        )
        log_flashcard_extraction(strategy.value, len(cards), len(capped), result.truncated, len(text))
        return result


def extract_flashcards(raw_response: Any, config: Optional[ExtractionConfig] = None) -> List[FlashcardCandidate]:
    return ExtractionPipeline(config).extract(raw_response).flashcards
