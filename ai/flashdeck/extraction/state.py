"""Scanner state shared by the block extractor and the line scanner.

A scan moves through three phases:

    AWAITING_QUESTION --question marker--> IN_QUESTION
    IN_QUESTION --answer marker / question limit reached--> IN_ANSWER
    any phase --answer marker--> IN_ANSWER

Untagged lines are routed by phase: ignored while awaiting a question,
appended to the question while in it (up to the limit), appended to the
answer once in the answer phase.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .models import FlashcardCandidate


class ScanPhase(Enum):
    AWAITING_QUESTION = 'awaiting_question'
    IN_QUESTION = 'in_question'
    IN_ANSWER = 'in_answer'


@dataclass
class ParserState:
    question_limit: int
    phase: ScanPhase = ScanPhase.AWAITING_QUESTION
    question: Optional[str] = None
    answer_lines: List[str] = field(default_factory=list)

    def start_question(self, text: str) -> None:
        self.question = text
        self.answer_lines = []
        self.phase = ScanPhase.IN_QUESTION

    def set_question(self, text: str) -> None:
        # keeps an already running answer; used when a block lists the answer first
        self.question = text
        if self.phase is ScanPhase.AWAITING_QUESTION:
            self.phase = ScanPhase.IN_QUESTION

    def start_answer(self, text: str) -> None:
        self.phase = ScanPhase.IN_ANSWER
        if text:
            self.answer_lines.append(text)

    def absorb(self, line: str) -> None:
        if self.phase is ScanPhase.IN_ANSWER:
            self.answer_lines.append(line)
        elif self.phase is ScanPhase.IN_QUESTION:
            if len(self.question or '') < self.question_limit:
                self.question = f'{self.question} {line}' if self.question else line
            else:
                self.phase = ScanPhase.IN_ANSWER
                self.answer_lines.append(line)

    def is_complete(self) -> bool:
        return bool((self.question or '').strip()) and bool('\n'.join(self.answer_lines).strip())

    def to_candidate(self) -> Optional[FlashcardCandidate]:
        question = (self.question or '').strip()
        answer = '\n'.join(self.answer_lines).strip()
        if not question or not answer:
            return None
        return FlashcardCandidate(question=question, answer=answer)
