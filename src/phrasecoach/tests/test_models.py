"""Tests for progress and session models."""
from datetime import datetime, UTC

import pytest

from phrasecoach.models.models import (
    KeywordRecord,
    LearnedData,
    Phrase,
    SessionRecord,
    UserStats,
)
from phrasecoach.models.session_models import SessionState


def test_phrase_serializes_with_file_keys() -> None:
    """Test that a phrase uses the progress file field names."""
    attempted = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
    phrase = Phrase(
        text="Hola",
        notes=["Greeting"],
        learned=True,
        attempts=2,
        correct_attempts=1,
        last_attempted_at=attempted,
    )

    assert phrase.to_dict() == {
        "phrase": "Hola",
        "lessons": ["Greeting"],
        "learned": True,
        "attempts": 2,
        "correct_attempts": 1,
        "last_attempted": attempted.isoformat(),
    }
    assert Phrase.from_dict(phrase.to_dict()) == phrase


def test_phrase_from_dict_defaults_missing_fields() -> None:
    """Test that only the phrase text is required."""
    phrase = Phrase.from_dict({"phrase": "Agua", "learned": False})

    assert phrase.notes == []
    assert phrase.attempts == 0
    assert phrase.correct_attempts == 0
    assert phrase.last_attempted_at is None


def test_keyword_record_is_learned() -> None:
    """Test when a keyword counts as learned."""
    assert KeywordRecord().is_learned() is False
    record = KeywordRecord(phrases=[Phrase("Hola", learned=True), Phrase("Buenos días")])
    assert record.is_learned() is False
    record.phrases[1].learned = True
    assert record.is_learned() is True
    assert record.find("Hola") is record.phrases[0]
    assert record.find("Adiós") is None


def test_empty_learned_data_schema() -> None:
    """Test the document written for a fresh progress file."""
    assert LearnedData().to_dict() == {
        "keywords": {},
        "userStats": {
            "totalKeywordsLearned": 0,
            "totalPhrasesLearned": 0,
            "totalAttempts": 0,
            "totalCorrectAttempts": 0,
            "sessionHistory": [],
        },
    }


def test_stats_are_computed_from_phrases() -> None:
    """Test that totals follow the per-phrase counters."""
    data = LearnedData(keywords={
        "hello": KeywordRecord(phrases=[Phrase("Hola", learned=True, attempts=3, correct_attempts=1)]),
        "water": KeywordRecord(phrases=[
            Phrase("Agua", learned=True, attempts=1, correct_attempts=1),
            Phrase("Bebo agua", attempts=2),
        ]),
        "food": KeywordRecord(),
    })

    stats = data.stats
    assert stats.total_keywords_learned == 1
    assert stats.total_phrases_learned == 2
    assert stats.total_attempts == 6
    assert stats.total_correct_attempts == 2
    assert stats.accuracy == pytest.approx(2 / 6)


def test_stored_totals_are_ignored_on_load() -> None:
    """Test that stale totals in the file never override the phrase counters."""
    data = LearnedData.from_dict({
        "keywords": {"hello": {"phrases": [{"phrase": "Hola", "learned": True, "attempts": 1, "correct_attempts": 1}]}},
        "userStats": {"totalKeywordsLearned": 99, "totalPhrasesLearned": 99, "totalAttempts": 99,
                      "totalCorrectAttempts": 99, "sessionHistory": []},
    })

    assert data.to_dict()["userStats"]["totalAttempts"] == 1
    assert data.to_dict()["userStats"]["totalKeywordsLearned"] == 1


def test_session_record_round_trip() -> None:
    """Test session history entries."""
    record = SessionRecord(
        start=datetime(2024, 5, 1, 10, 0, tzinfo=UTC),
        end=datetime(2024, 5, 1, 10, 20, tzinfo=UTC),
        keywords_covered=["water", "hello"],
        accuracy=0.5,
    )

    data = record.to_dict()
    assert data["keywordsCovered"] == ["hello", "water"]
    assert data["sessionStart"] == "2024-05-01T10:00:00+00:00"
    assert SessionRecord.from_dict(data) == SessionRecord(
        start=record.start, end=record.end, keywords_covered=["hello", "water"], accuracy=0.5
    )


def test_session_state_streak_and_lives() -> None:
    """Test streak and lives bookkeeping."""
    state = SessionState(lives=3)

    state.record_correct()
    assert state.streak == 1
    assert state.lives == 3

    state.record_incorrect()
    assert state.streak == 0
    assert state.lives == 2
    assert state.best_streak == 1
    assert state.accuracy == 0.5


def test_session_state_three_wrong_answers_exhaust_lives() -> None:
    """Test that three consecutive wrong answers leave no lives."""
    state = SessionState(lives=3)
    for _ in range(3):
        assert not state.out_of_lives
        state.record_incorrect()

    assert state.lives == 0
    assert state.out_of_lives


def test_session_state_without_lives_never_runs_out() -> None:
    """Test the non-gamified variant."""
    state = SessionState(lives=None)
    for _ in range(10):
        state.record_incorrect()

    assert state.lives is None
    assert not state.out_of_lives


def test_session_state_to_record() -> None:
    """Test building a history entry from the session state."""
    state = SessionState(lives=3)
    state.keywords_covered.update({"water", "hello"})
    state.record_correct()
    state.record_incorrect()
    state.record_correct()

    record = state.to_record()
    assert record.keywords_covered == ["hello", "water"]
    assert record.accuracy == pytest.approx(2 / 3)
    assert record.end >= record.start


def test_user_stats_accuracy_without_attempts() -> None:
    assert UserStats().accuracy == 0.0



@pytest.mark.parametrize("data, name", [
    ({"keywords": []}, "keywords"),
    ({"userStats": "none"}, "userStats"),
    ({"keywords": {"hello": {"phrases": {}}}}, "phrases"),
    ({"keywords": {"hello": {"phrases": ["Hola"]}}}, "phrase entry"),
    ({"userStats": {"sessionHistory": {}}}, "sessionHistory"),
])
def test_learned_data_rejects_wrong_types(data, name) -> None:
    with pytest.raises(ValueError, match=name):
        LearnedData.from_dict(data)

if __name__ == "__main__":
    pytest.main([__file__])
