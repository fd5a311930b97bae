"""
Deck and flashcard persistence.
"""

from .models import Deck, Flashcard
from .repository import DeckRepository, DeckRepositoryError, DeckNotFoundError

__all__ = [
	'Deck',
	'Flashcard',
	'DeckRepository',
	'DeckRepositoryError',
	'DeckNotFoundError',
]
