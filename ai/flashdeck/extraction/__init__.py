"""
Flashcard extraction engine.
Turns free-form LLM output into validated question/answer candidates.
"""

from .config import ExtractionConfig
from .markers import MarkerKind, MarkerMatch, MARKERS, match_prefix, find_marker
from .models import FlashcardCandidate, ExtractionResult, ExtractionStrategy
from .normalizer import normalize, normalize_line
from .section_splitter import split_sections, extract_block, extract_by_separator
from .line_scanner import scan_lines
from .keyword_split import split_by_keywords, KEYWORD_TOKENS
from .pipeline import ExtractionPipeline, extract_flashcards

__all__ = [
	'ExtractionConfig',
	'MarkerKind', 'MarkerMatch', 'MARKERS', 'match_prefix', 'find_marker',
	'FlashcardCandidate', 'ExtractionResult', 'ExtractionStrategy',
	'normalize', 'normalize_line',
	'split_sections', 'extract_block', 'extract_by_separator',
	'scan_lines',
	'split_by_keywords', 'KEYWORD_TOKENS',
	'ExtractionPipeline', 'extract_flashcards',
]
