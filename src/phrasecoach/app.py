"""Main application: builds the session context and drives the session loop."""
import asyncio
import logging
from typing import Optional

import httpx

from phrasecoach.config import AppConfig, ConfigStore, settings
from phrasecoach.exceptions import ConfigError, PersistenceError
from phrasecoach.models.session_models import LessonOutcome
from phrasecoach.services.console import ConsoleIO, SessionIO
from phrasecoach.services.content_generator import ContentService, FormulaicContentService
from phrasecoach.services.context import SessionContext
from phrasecoach.services.keyword_scheduler import KeywordScheduler
from phrasecoach.services.lesson_service import LessonSession
from phrasecoach.services.progress_store import ProgressStore

logger = logging.getLogger(__name__)


class SessionLoop:
    """Runs lessons one keyword after another until the session ends."""

    def __init__(
        self,
        context: SessionContext,
        scheduler: Optional[KeywordScheduler] = None,
        lesson: Optional[LessonSession] = None,
    ):
        self.context = context
        self.scheduler = scheduler or KeywordScheduler()
        self.lesson = lesson or LessonSession(context)

    async def run(self) -> Optional[LessonOutcome]:
        """Run the session. Returns the outcome that stopped it, None on exhaustion."""
        io = self.context.io
        save_failed = False
        try:
            while True:
                keyword = self.scheduler.next(self.context.progress, self.context.vocabulary)
                if keyword is None:
                    io.show_message("Congratulations! You have learned every keyword.", "bold green")
                    return None

                logger.info("Using keyword for grounding: %r", keyword)
                outcome = await self.lesson.run(keyword)
                if outcome is LessonOutcome.EXIT:
                    io.show_message("Goodbye!", "bold")
                    return outcome
                if outcome is LessonOutcome.GAME_OVER:
                    io.show_message("Game over! You ran out of lives.", "bold red")
                    return outcome
        except PersistenceError:
            save_failed = True
            raise
        finally:
            self.finish(record=not save_failed)

    def finish(self, record: bool = True) -> None:
        """Store the session in the history and show the summary."""
        state = self.context.state
        progress = self.context.progress
        if record and state.keywords_covered:
            progress.record_session(state.to_record())
        self.context.io.show_summary(state, progress.stats())


class PhraseCoach:
    """Main application class."""

    def __init__(
        self,
        config_store: Optional[ConfigStore] = None,
        io: Optional[SessionIO] = None,
        content: Optional[ContentService] = None,
    ):
        """Initialize the application."""
        self.config_store = config_store or ConfigStore()
        self.io = io
        self.content = content
        self.config: Optional[AppConfig] = None
        self.context: Optional[SessionContext] = None
        self.running = False

    async def start(self) -> SessionContext:
        """Load config and progress and connect the content service."""
        if self.context is not None:
            return self.context

        if self.config is None:
            self.config = self.config_store.load()
        logger.info("Config loaded from %s", self.config_store.path)

        progress = ProgressStore(self.config.data_file)
        logger.info("Progress loaded from %s", self.config.data_file)

        if self.content is None:
            self.content = FormulaicContentService(self.config)

        if not self.config.formula_id:
            logger.info("Formula ID not found, creating new formula...")
            try:
                self.config.formula_id = await self.content.create_formula()
            except (httpx.HTTPError, KeyError, ValueError) as e:
                raise ConfigError(f"Could not create the phrase formula: {e}") from e
            self.config_store.save(self.config)

        vocabulary = list(settings.learning.vocabulary)
        for keyword in vocabulary:
            progress.ensure_keyword(keyword)

        self.context = SessionContext(
            config=self.config,
            progress=progress,
            content=self.content,
            io=self.io or ConsoleIO(prefix=settings.learning.command_prefix),
            vocabulary=vocabulary,
        )
        self.running = True
        return self.context

    async def stop(self) -> None:
        """Close the content service."""
        if self.content is not None:
            await self.content.close()
        self.running = False

    async def run_session(self) -> Optional[LessonOutcome]:
        """Start, run one session and stop."""
        try:
            context = await self.start()
            return await SessionLoop(context).run()
        except (KeyboardInterrupt, EOFError):
            logger.info("Session interrupted by user")
            return LessonOutcome.EXIT
        finally:
            await self.stop()

    def run(self) -> Optional[LessonOutcome]:
        """Run the application."""
        # The API key prompt reads stdin, so it runs before the event loop starts.
        if self.config is None:
            self.config = self.config_store.load()
        return asyncio.run(self.run_session())
