"""Tests for the command line entry point."""
from unittest.mock import patch

import pytest

from phrasecoach import __main__ as entry
from phrasecoach.exceptions import ConfigError, GenerationError, PersistenceError
from phrasecoach.models.session_models import LessonOutcome


@pytest.fixture
def coach():
    """Replace the application and the process-wide setup calls."""
    with patch.object(entry, "ensure_directories"), patch.object(entry, "setup_logging"):
        with patch.object(entry, "PhraseCoach") as coach_class:
            yield coach_class.return_value


@pytest.mark.parametrize("outcome", [LessonOutcome.EXIT, LessonOutcome.GAME_OVER, None])
def test_finished_session_exits_with_zero(coach, outcome) -> None:
    coach.run.return_value = outcome

    assert entry.main() == 0
    coach.run.assert_called_once_with()


def test_keyboard_interrupt_exits_with_zero(coach) -> None:
    coach.run.side_effect = KeyboardInterrupt

    assert entry.main() == 0


@pytest.mark.parametrize("error", [
    ConfigError("API key is required to run the application."),
    PersistenceError("disk full"),
    GenerationError("No phrase generated for keyword 'hello' after 5 attempts"),
])
def test_fatal_error_exits_with_one(coach, error, capsys) -> None:
    """Test that application errors are printed and give status 1."""
    coach.run.side_effect = error

    assert entry.main() == 1
    assert f"Error: {error}" in capsys.readouterr().err


def test_unexpected_error_propagates(coach) -> None:
    coach.run.side_effect = RuntimeError("bug")

    with pytest.raises(RuntimeError):
        entry.main()


if __name__ == "__main__":
    pytest.main([__file__])
