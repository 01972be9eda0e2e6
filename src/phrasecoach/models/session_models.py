"""Models for the state of a running practice session."""
from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from typing import Optional, Set

from phrasecoach.models.models import SessionRecord


class Command(Enum):
    """Commands the user can type while a phrase is shown."""
    SKIP = "skip"  # Move on without grading
    EXPLAIN = "explain"  # Ask for an explanation of the phrase
    HELP = "help"  # Show the command list
    EXIT = "exit"  # End the session
    UNKNOWN = "unknown"  # Prefixed but not a known command


class CommandResult(Enum):
    """What the lesson does after a command ran."""
    CONTINUE = "continue"  # Keep waiting for input on the same phrase
    SKIP = "skip"  # Resolve the phrase without an attempt
    EXIT = "exit"  # Stop the whole session


class LessonOutcome(Enum):
    """How a lesson for one phrase ended."""
    RESOLVED = "resolved"
    SKIPPED = "skipped"
    EXIT = "exit"
    GAME_OVER = "game_over"


@dataclass
class Grade:
    """Grading service verdict on one translation attempt."""
    correct: bool
    lesson: str = ""


@dataclass
class SessionState:
    """Ephemeral state of one session, never persisted as is."""
    lives: Optional[int] = None  # None when lives are unbounded
    streak: int = 0
    best_streak: int = 0
    keyword: Optional[str] = None
    phrase: Optional[str] = None
    attempts: int = 0
    correct_attempts: int = 0
    keywords_covered: Set[str] = field(default_factory=set)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def record_correct(self) -> None:
        self.attempts += 1
        self.correct_attempts += 1
        self.streak += 1
        self.best_streak = max(self.best_streak, self.streak)

    def record_incorrect(self) -> None:
        self.attempts += 1
        self.streak = 0
        if self.lives is not None:
            self.lives = max(self.lives - 1, 0)

    def reset_streak(self) -> None:
        self.streak = 0

    @property
    def out_of_lives(self) -> bool:
        return self.lives is not None and self.lives <= 0

    @property
    def accuracy(self) -> float:
        if not self.attempts:
            return 0.0
        return self.correct_attempts / self.attempts

    def to_record(self, ended_at: Optional[datetime] = None) -> SessionRecord:
        """Build the history entry for this session."""
        return SessionRecord(
            start=self.started_at,
            end=ended_at or datetime.now(UTC),
            keywords_covered=sorted(self.keywords_covered),
            accuracy=self.accuracy,
        )
