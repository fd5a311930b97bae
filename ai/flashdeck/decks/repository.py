"""SQLite-backed storage for decks and their flashcards.

Schema:
  - decks: id, name, description, created_at
  - flashcards: id, deck_id (FK -> decks, cascade), question, answer, created_at
"""
from __future__ import annotations

import os
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from flashdeck.extraction import FlashcardCandidate
from flashdeck.utils import get_logger

from .models import Deck, Flashcard

LOG = get_logger()

DECK_DB_PATH = os.getenv('DECK_DB_PATH', 'flashcards.db')

SCHEMA = """
CREATE TABLE IF NOT EXISTS decks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS flashcards (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    deck_id INTEGER NOT NULL,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL,
    FOREIGN KEY (deck_id) REFERENCES decks(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_flashcards_deck ON flashcards(deck_id);
"""


class DeckRepositoryError(Exception):
    pass


class DeckNotFoundError(DeckRepositoryError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DeckRepository:
    _instance = None

    def __init__(self, db_path: str = None):
        self.db_path = db_path or DECK_DB_PATH
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute('PRAGMA foreign_keys = ON')
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            LOG.error('deck_db_init_failed', extra={'db_path': self.db_path, 'error': str(e)})
            raise DeckRepositoryError(f'Database initialization failed: {e}') from e
        LOG.info('DeckRepository initialized', extra={'db_path': self.db_path})

    @classmethod
    def get_instance(cls) -> 'DeckRepository':
        if cls._instance is None:
            cls._instance = DeckRepository()
        return cls._instance

    def close(self):
        with self._lock:
            self._conn.close()

    def ping(self) -> bool:
        with self._lock:
            self._conn.execute('SELECT 1').fetchone()
        return True

    @staticmethod
    def _flashcard(row: sqlite3.Row) -> Flashcard:
        return Flashcard(id=row['id'], deck_id=row['deck_id'], question=row['question'], answer=row['answer'], created_at=row['created_at'])

    def _deck_exists(self, deck_id: int) -> bool:
        return self._conn.execute('SELECT 1 FROM decks WHERE id = ?', (deck_id,)).fetchone() is not None

    def _flashcards_for(self, deck_id: int) -> List[Flashcard]:
        rows = self._conn.execute('SELECT * FROM flashcards WHERE deck_id = ? ORDER BY id', (deck_id,)).fetchall()
        return [self._flashcard(r) for r in rows]

    def list_decks(self) -> List[Deck]:
        with self._lock:
            rows = self._conn.execute('SELECT * FROM decks ORDER BY id').fetchall()
            return [
                Deck(id=r['id'], name=r['name'], description=r['description'], created_at=r['created_at'], flashcards=self._flashcards_for(r['id']))
                for r in rows
            ]

    def get_deck(self, deck_id: int) -> Optional[Deck]:
        with self._lock:
            row = self._conn.execute('SELECT * FROM decks WHERE id = ?', (deck_id,)).fetchone()
            if row is None:
                return None
            return Deck(id=row['id'], name=row['name'], description=row['description'], created_at=row['created_at'], flashcards=self._flashcards_for(deck_id))

    def create_deck(self, name: str, description: Optional[str] = None) -> Deck:
        if not name or not name.strip():
            raise DeckRepositoryError('Deck name is required')
        created_at = _now()
        with self._lock:
            cur = self._conn.execute(
                'INSERT INTO decks (name, description, created_at) VALUES (?, ?, ?)',
                (name.strip(), description, created_at),
            )
            self._conn.commit()
            deck_id = cur.lastrowid
        LOG.info('deck_created', extra={'deck_id': deck_id})
        return Deck(id=deck_id, name=name.strip(), description=description, created_at=created_at)

    def list_flashcards(self, deck_id: int) -> List[Flashcard]:
        with self._lock:
            if not self._deck_exists(deck_id):
                raise DeckNotFoundError(f'Deck with ID {deck_id} not found')
            return self._flashcards_for(deck_id)

    def create_flashcard(self, deck_id: int, question: str, answer: str) -> Flashcard:
        question = (question or '').strip()
        answer = (answer or '').strip()
        if not question:
            raise DeckRepositoryError('Question is required')
        if not answer:
            raise DeckRepositoryError('Answer is required')
        return self.create_flashcards(deck_id, [FlashcardCandidate(question=question, answer=answer)])[0]

    def create_flashcards(self, deck_id: int, candidates: Iterable[FlashcardCandidate]) -> List[Flashcard]:
        """Store candidates in order in one transaction; returns the stored records."""
        created_at = _now()
        stored: List[Flashcard] = []
        with self._lock:
            if not self._deck_exists(deck_id):
                raise DeckNotFoundError(f'Deck with ID {deck_id} not found')
            try:
                for c in candidates:
                    cur = self._conn.execute(
                        'INSERT INTO flashcards (deck_id, question, answer, created_at) VALUES (?, ?, ?, ?)',
                        (deck_id, c.question, c.answer, created_at),
                    )
                    stored.append(Flashcard(id=cur.lastrowid, deck_id=deck_id, question=c.question, answer=c.answer, created_at=created_at))
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                LOG.exception('flashcards_insert_failed', extra={'deck_id': deck_id})
                raise DeckRepositoryError(f'Could not store flashcards: {e}') from e
        LOG.info('flashcards_created', extra={'deck_id': deck_id, 'count': len(stored)})
        return stored
