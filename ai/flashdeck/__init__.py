"""
flashdeck: lecture-to-flashcard service.

Generates question/answer flashcards from lecture text through an external
LLM provider, extracts them from free-form model output, and stores them in
decks.
"""

__version__ = '1.0.0'
