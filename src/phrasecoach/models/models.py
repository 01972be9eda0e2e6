"""Data models for the learning progress file."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _expect(value: Any, kind: type, name: str) -> Any:
    """Check the type of a value read from the progress file."""
    if not isinstance(value, kind):
        raise ValueError(f"{name} must be a {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass
class Phrase:
    """A generated target-language phrase with its attempt history."""
    text: str
    notes: List[str] = field(default_factory=list)
    learned: bool = False
    attempts: int = 0
    correct_attempts: int = 0
    last_attempted_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phrase": self.text,
            "lessons": list(self.notes),
            "learned": self.learned,
            "attempts": self.attempts,
            "correct_attempts": self.correct_attempts,
            "last_attempted": _to_iso(self.last_attempted_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Phrase":
        _expect(data, dict, "phrase entry")
        return cls(
            text=data["phrase"],
            notes=list(_expect(data.get("lessons", []), list, "lessons")),
            learned=bool(data.get("learned", False)),
            attempts=int(data.get("attempts", 0)),
            correct_attempts=int(data.get("correct_attempts", 0)),
            last_attempted_at=_from_iso(data.get("last_attempted")),
        )


@dataclass
class KeywordRecord:
    """Phrases generated for one keyword, in generation order."""
    phrases: List[Phrase] = field(default_factory=list)

    def find(self, text: str) -> Optional[Phrase]:
        """Get a phrase by its text."""
        for phrase in self.phrases:
            if phrase.text == text:
                return phrase
        return None

    def is_learned(self) -> bool:
        """A keyword is learned once it has phrases and all of them are learned."""
        return bool(self.phrases) and all(phrase.learned for phrase in self.phrases)

    def to_dict(self) -> Dict[str, Any]:
        return {"phrases": [phrase.to_dict() for phrase in self.phrases]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeywordRecord":
        _expect(data, dict, "keyword record")
        phrases = _expect(data.get("phrases", []), list, "phrases")
        return cls(phrases=[Phrase.from_dict(item) for item in phrases])


@dataclass
class SessionRecord:
    """Summary of one finished practice session."""
    start: datetime
    end: datetime
    keywords_covered: List[str] = field(default_factory=list)
    accuracy: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionStart": self.start.isoformat(),
            "sessionEnd": self.end.isoformat(),
            "keywordsCovered": sorted(self.keywords_covered),
            "accuracy": self.accuracy,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        _expect(data, dict, "session entry")
        return cls(
            start=datetime.fromisoformat(data["sessionStart"]),
            end=datetime.fromisoformat(data["sessionEnd"]),
            keywords_covered=sorted(data.get("keywordsCovered", [])),
            accuracy=float(data.get("accuracy", 0.0)),
        )


@dataclass
class UserStats:
    """Aggregates derived from the keyword records plus the session history."""
    total_keywords_learned: int = 0
    total_phrases_learned: int = 0
    total_attempts: int = 0
    total_correct_attempts: int = 0
    session_history: List[SessionRecord] = field(default_factory=list)

    @classmethod
    def compute(cls, keywords: Dict[str, KeywordRecord], session_history: List[SessionRecord]) -> "UserStats":
        """Recompute the totals from the per-phrase counters."""
        phrases = [phrase for record in keywords.values() for phrase in record.phrases]
        return cls(
            total_keywords_learned=sum(1 for record in keywords.values() if record.is_learned()),
            total_phrases_learned=sum(1 for phrase in phrases if phrase.learned),
            total_attempts=sum(phrase.attempts for phrase in phrases),
            total_correct_attempts=sum(phrase.correct_attempts for phrase in phrases),
            session_history=list(session_history),
        )

    @property
    def accuracy(self) -> float:
        if not self.total_attempts:
            return 0.0
        return self.total_correct_attempts / self.total_attempts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalKeywordsLearned": self.total_keywords_learned,
            "totalPhrasesLearned": self.total_phrases_learned,
            "totalAttempts": self.total_attempts,
            "totalCorrectAttempts": self.total_correct_attempts,
            "sessionHistory": [record.to_dict() for record in self.session_history],
        }


@dataclass
class LearnedData:
    """The whole progress file: keyword records plus user statistics.

    Only the session history of the statistics is stored state; the totals are
    recomputed from the keyword records every time they are read or written.
    """
    keywords: Dict[str, KeywordRecord] = field(default_factory=dict)
    session_history: List[SessionRecord] = field(default_factory=list)

    @property
    def stats(self) -> UserStats:
        return UserStats.compute(self.keywords, self.session_history)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keywords": {keyword: record.to_dict() for keyword, record in self.keywords.items()},
            "userStats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearnedData":
        keywords = _expect(data.get("keywords", {}), dict, "keywords")
        user_stats = _expect(data.get("userStats", {}), dict, "userStats")
        history = _expect(user_stats.get("sessionHistory", []), list, "sessionHistory")
        return cls(
            keywords={
                keyword: KeywordRecord.from_dict({} if record is None else record)
                for keyword, record in keywords.items()
            },
            session_history=[SessionRecord.from_dict(item) for item in history],
        )
