"""Utility subpackage: structured logging and request context"""

from .logger import (
	get_logger,
	log_request,
	log_error,
	log_llm_call,
	log_flashcard_extraction,
	log_flashcard_generation,
	set_request_context,
	get_request_context,
)

__all__ = [
	'get_logger',
	'log_request',
	'log_error',
	'log_llm_call',
	'log_flashcard_extraction',
	'log_flashcard_generation',
	'set_request_context',
	'get_request_context',
]
