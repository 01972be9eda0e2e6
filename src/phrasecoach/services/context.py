"""Shared context passed to every part of a practice session."""
from dataclasses import dataclass, field
from typing import List

from phrasecoach.config import AppConfig, settings
from phrasecoach.models.session_models import SessionState
from phrasecoach.services.console import SessionIO
from phrasecoach.services.content_generator import ContentService
from phrasecoach.services.progress_store import ProgressStore


def new_session_state() -> SessionState:
    """Start a session with the configured lives."""
    lives = settings.learning.starting_lives if settings.learning.gamified else None
    return SessionState(lives=lives)


@dataclass
class SessionContext:
    """Everything a session needs, built once and passed by reference."""
    config: AppConfig
    progress: ProgressStore
    content: ContentService
    io: SessionIO
    vocabulary: List[str] = field(default_factory=lambda: list(settings.learning.vocabulary))
    state: SessionState = field(default_factory=new_session_state)
