"""
Flashcard generation through an OpenAI-compatible chat completion provider.
"""

from .prompts import build_prompt
from .generator import (
	FlashcardGenerator,
	GenerationResult,
	ProviderSettings,
	configured_providers,
	generate_flashcards,
	GenerationError,
	GenerationConfigError,
	GenerationAPIError,
	GenerationTimeoutError,
	GenerationRateLimitError,
)

__all__ = [
	'build_prompt',
	'FlashcardGenerator',
	'GenerationResult',
	'ProviderSettings',
	'configured_providers',
	'generate_flashcards',
	'GenerationError',
	'GenerationConfigError',
	'GenerationAPIError',
	'GenerationTimeoutError',
	'GenerationRateLimitError',
]
