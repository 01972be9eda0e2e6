"""Test configuration."""
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from phrasecoach.config import AppConfig, ensure_directories
from phrasecoach.models.models import UserStats
from phrasecoach.models.session_models import Grade, SessionState
from phrasecoach.services.console import SessionIO
from phrasecoach.services.content_generator import ContentService
from phrasecoach.services.context import SessionContext
from phrasecoach.services.progress_store import ProgressStore


class ScriptedIO(SessionIO):
    """Session IO that replays prepared input lines and records what is shown."""

    def __init__(self, inputs: Iterable[str] = ()):
        self.inputs: List[str] = list(inputs)
        self.events: List[tuple] = []

    async def read_line(self, prompt: str) -> str:
        if not self.inputs:
            raise EOFError("No more scripted input")
        return self.inputs.pop(0)

    def show_phrase(self, phrase, keyword, state):
        self.events.append(("phrase", phrase, keyword))

    def show_correct(self, lesson, state):
        self.events.append(("correct", lesson))

    def show_incorrect(self, lesson, state):
        self.events.append(("incorrect", lesson))

    def show_message(self, message, style=""):
        self.events.append(("message", message))

    def show_explanation(self, phrase, explanation):
        self.events.append(("explanation", phrase, explanation))

    def show_help(self, prefix):
        self.events.append(("help", prefix))

    def show_summary(self, state: SessionState, stats: UserStats):
        self.events.append(("summary", state.attempts, stats.total_phrases_learned))

    def kinds(self) -> List[str]:
        return [event[0] for event in self.events]


class FakeContent(ContentService):
    """Content service returning queued phrases, grades and explanations."""

    def __init__(self):
        self.phrases: List[Optional[str]] = []
        self.grades: List[Union[Grade, Exception]] = []
        self.explanation: Union[str, None, Exception] = None
        self.generate_calls: List[str] = []
        self.grade_calls: List[tuple] = []
        self.explain_calls: List[str] = []
        self.formula_id = "formula-new"
        self.closed = False

    async def generate_phrase(self, keyword, user_lang, target_lang, difficulty):
        self.generate_calls.append(keyword)
        return self.phrases.pop(0) if self.phrases else None

    async def grade(self, user_input, correct_phrase, user_lang, target_lang):
        self.grade_calls.append((user_input, correct_phrase))
        grade = self.grades.pop(0)
        if isinstance(grade, Exception):
            raise grade
        return grade

    async def explain(self, phrase, user_lang, target_lang):
        self.explain_calls.append(phrase)
        if isinstance(self.explanation, Exception):
            raise self.explanation
        return self.explanation

    async def create_formula(self):
        return self.formula_id

    async def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "learned.json"


@pytest.fixture
def progress(data_file: Path) -> ProgressStore:
    """Create a progress store backed by a temporary file."""
    return ProgressStore(data_file)


@pytest.fixture
def app_config(data_file: Path) -> AppConfig:
    return AppConfig(api_key="test-key", formula_id="formula-1", data_file=str(data_file))


@pytest.fixture
def io() -> ScriptedIO:
    return ScriptedIO()


@pytest.fixture
def content() -> FakeContent:
    return FakeContent()


@pytest.fixture
def context(app_config: AppConfig, progress: ProgressStore, content: FakeContent, io: ScriptedIO) -> SessionContext:
    """Create a session context with three lives and a two-keyword vocabulary."""
    return SessionContext(
        config=app_config,
        progress=progress,
        content=content,
        io=io,
        vocabulary=["hello", "water"],
        state=SessionState(lives=3),
    )
