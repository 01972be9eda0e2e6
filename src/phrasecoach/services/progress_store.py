"""Progress store for keywords, phrases and attempt statistics."""
import json
import logging
from datetime import datetime, UTC
from pathlib import Path
from typing import List, Optional, Union

from phrasecoach.exceptions import NotFoundError, PersistenceError
from phrasecoach.file_utils import write_json_atomic
from phrasecoach.models.models import (
    KeywordRecord,
    LearnedData,
    Phrase,
    SessionRecord,
    UserStats,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class JsonProgressFile:
    """Reads and writes the progress data as a JSON document."""

    @staticmethod
    def load(path: PathLike) -> LearnedData:
        """Load progress data, creating an empty file if it doesn't exist."""
        path = Path(path)
        if not path.exists():
            logger.warning("Data file not found at %s. Creating an empty file.", path)
            data = LearnedData()
            JsonProgressFile.save(path, data)
            return data

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("top-level value must be an object")
            return LearnedData.from_dict(raw)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("Error loading learned data from %s: %s", path, e)
            raise PersistenceError(f"Could not load progress file {path}: {e}") from e

    @staticmethod
    def save(path: PathLike, data: LearnedData) -> None:
        """Write progress data, replacing the previous file in one step."""
        path = Path(path)
        try:
            write_json_atomic(path, data.to_dict())
        except OSError as e:
            logger.error("Error saving learned data to %s: %s", path, e)
            raise PersistenceError(f"Could not save progress file {path}: {e}") from e


class ProgressStore:
    """Durable record of what the user has practiced.

    Every mutating method saves the whole document before returning, so a
    mutation that fails to save raises instead of being kept in memory only.
    """

    def __init__(self, path: PathLike, persistence: Optional[JsonProgressFile] = None):
        """Load the store from the given file."""
        self.path = Path(path)
        self.persistence = persistence or JsonProgressFile()
        self._data = self.persistence.load(self.path)

    def _save(self) -> None:
        self.persistence.save(self.path, self._data)

    def ensure_keyword(self, keyword: str) -> KeywordRecord:
        """Create an empty record for the keyword if it doesn't exist."""
        record = self._data.keywords.get(keyword)
        if record is None:
            record = KeywordRecord()
            self._data.keywords[keyword] = record
            self._save()
            logger.debug("Created keyword record for %r", keyword)
        return record

    def append_phrase(self, keyword: str, text: str) -> Phrase:
        """Add a phrase under the keyword unless one with the same text exists."""
        record = self._data.keywords.get(keyword)
        if record is None:
            record = KeywordRecord()
            self._data.keywords[keyword] = record

        phrase = record.find(text)
        if phrase is not None:
            logger.debug("Reusing phrase %r for keyword %r", text, keyword)
            return phrase

        phrase = Phrase(text=text)
        record.phrases.append(phrase)
        self._save()
        logger.info("Stored new phrase for keyword %r: %r", keyword, text)
        return phrase

    def get_phrase(self, keyword: str, text: str) -> Optional[Phrase]:
        """Get a phrase by keyword and text."""
        record = self._data.keywords.get(keyword)
        if record is None:
            return None
        return record.find(text)

    def _require_phrase(self, keyword: str, text: str) -> Phrase:
        if keyword not in self._data.keywords:
            raise NotFoundError(f"Keyword {keyword!r} not found")
        phrase = self._data.keywords[keyword].find(text)
        if phrase is None:
            raise NotFoundError(f"Phrase {text!r} not found under keyword {keyword!r}")
        return phrase

    def record_attempt(self, keyword: str, phrase_text: str, correct: bool) -> Phrase:
        """Count one graded attempt on a phrase."""
        phrase = self._require_phrase(keyword, phrase_text)
        phrase.attempts += 1
        if correct:
            phrase.learned = True
            phrase.correct_attempts += 1
        phrase.last_attempted_at = datetime.now(UTC)
        self._save()
        logger.info(
            "Recorded %s attempt for %r (%d/%d correct)",
            "correct" if correct else "incorrect",
            phrase_text,
            phrase.correct_attempts,
            phrase.attempts,
        )
        return phrase

    def add_lesson(self, keyword: str, phrase_text: str, lesson: str) -> None:
        """Keep a grading lesson as a note on the phrase."""
        lesson = lesson.strip()
        if not lesson:
            return
        phrase = self._require_phrase(keyword, phrase_text)
        if lesson in phrase.notes:
            return
        phrase.notes.append(lesson)
        self._save()

    def first_unlearned_phrase(self, keyword: str) -> Optional[Phrase]:
        """Get the oldest phrase under the keyword that is not learned yet."""
        record = self._data.keywords.get(keyword)
        if record is None:
            return None
        return next((phrase for phrase in record.phrases if not phrase.learned), None)

    def has_unlearned_content(self, keyword: str) -> bool:
        """True if the keyword has no phrases yet or any phrase is not learned."""
        record = self._data.keywords.get(keyword)
        if record is None or not record.phrases:
            return True
        return any(not phrase.learned for phrase in record.phrases)

    def keywords(self) -> List[str]:
        """Get all known keywords in insertion order."""
        return list(self._data.keywords)

    def record_session(self, record: SessionRecord) -> None:
        """Append a finished session to the history."""
        self._data.session_history.append(record)
        self._save()
        logger.info(
            "Session recorded: %d keywords, accuracy %.0f%%",
            len(record.keywords_covered),
            record.accuracy * 100,
        )

    def stats(self) -> UserStats:
        """Get statistics recomputed from the keyword records."""
        return self._data.stats

    def snapshot(self) -> LearnedData:
        """Get a detached copy of the current data."""
        return LearnedData.from_dict(self._data.to_dict())
