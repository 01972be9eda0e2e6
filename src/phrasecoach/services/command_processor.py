"""Parsing and handling of in-session commands."""
import logging
from typing import Optional

from phrasecoach.config import settings
from phrasecoach.models.session_models import Command, CommandResult
from phrasecoach.services.context import SessionContext

logger = logging.getLogger(__name__)


class CommandProcessor:
    """Handles '/'-prefixed lines typed while a phrase is shown."""

    def __init__(self, context: SessionContext, prefix: Optional[str] = None):
        self.context = context
        self.prefix = prefix or settings.learning.command_prefix

    def parse(self, line: str) -> Optional[Command]:
        """Get the command in a line, or None if the line is not a command."""
        line = line.strip()
        if not line.startswith(self.prefix):
            return None
        name = line[len(self.prefix):].strip().lower()
        try:
            command = Command(name)
        except ValueError:
            return Command.UNKNOWN
        return Command.UNKNOWN if command is Command.UNKNOWN else command

    async def dispatch(self, command: Command) -> CommandResult:
        """Run a command. Only skip touches session state, by resetting the streak."""
        logger.debug("Dispatching command %s", command.value)
        io = self.context.io

        if command is Command.SKIP:
            self.context.state.reset_streak()
            return CommandResult.SKIP
        if command is Command.EXIT:
            return CommandResult.EXIT
        if command is Command.HELP:
            io.show_help(self.prefix)
            return CommandResult.CONTINUE
        if command is Command.EXPLAIN:
            await self._explain()
            return CommandResult.CONTINUE

        io.show_message(f"Unknown command. Type {self.prefix}help to see the available commands.", "yellow")
        return CommandResult.CONTINUE

    async def _explain(self) -> None:
        phrase = self.context.state.phrase
        if not phrase:
            self.context.io.show_explanation("", None)
            return
        config = self.context.config
        explanation = None
        try:
            explanation = await self.context.content.explain(phrase, config.user_lang, config.target_lang)
        except Exception as e:
            logger.error("Error explaining phrase %r: %s", phrase, e)
        self.context.io.show_explanation(phrase, explanation)
