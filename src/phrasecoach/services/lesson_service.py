"""Lesson service running the practice of a single phrase."""
import asyncio
import logging
from typing import Optional

from phrasecoach.config import settings
from phrasecoach.exceptions import GenerationError
from phrasecoach.models.session_models import CommandResult, Grade, LessonOutcome
from phrasecoach.services.command_processor import CommandProcessor
from phrasecoach.services.context import SessionContext

logger = logging.getLogger(__name__)

INPUT_PROMPT = "Your translation: "
GRADING_ERROR_LESSON = "Error grading input"


class LessonSession:
    """State machine for one phrase: present it, collect attempts, grade them.

    A wrong answer keeps the same phrase and waits for another attempt. The
    lesson ends when the phrase is answered correctly, skipped, the user exits
    or (in the gamified variant) the last life is lost.
    """

    def __init__(
        self,
        context: SessionContext,
        commands: Optional[CommandProcessor] = None,
        max_generation_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.context = context
        self.commands = commands or CommandProcessor(context)
        self.max_generation_attempts = max_generation_attempts or settings.content.max_generation_attempts
        self.retry_delay = settings.content.generation_retry_delay if retry_delay is None else retry_delay
        self.skip_token = settings.learning.skip_token.lower()

    async def run(self, keyword: str) -> LessonOutcome:
        """Practice one freshly generated phrase for the keyword."""
        state = self.context.state
        phrase = await self.present(keyword)
        state.keyword = keyword
        state.phrase = phrase
        state.keywords_covered.add(keyword)
        self.context.io.show_phrase(phrase, keyword, state)

        while True:
            line = (await self.context.io.read_line(INPUT_PROMPT)).strip()

            if not line or line.lower() == self.skip_token:
                return self._skip()

            command = self.commands.parse(line)
            if command is not None:
                result = await self.commands.dispatch(command)
                if result is CommandResult.EXIT:
                    logger.info("User exited during keyword %r", keyword)
                    return LessonOutcome.EXIT
                if result is CommandResult.SKIP:
                    return self._skip()
                continue

            grade = await self.grade(line, phrase)
            outcome = self._apply_grade(keyword, phrase, grade)
            if outcome is not None:
                return outcome

    async def present(self, keyword: str) -> str:
        """Get a phrase for the keyword.

        A stored phrase that is not learned yet is shown again. Otherwise a new
        one is generated, retrying a bounded number of times.
        """
        pending = self.context.progress.first_unlearned_phrase(keyword)
        if pending is not None:
            logger.info("Showing unlearned phrase %r again for keyword %r", pending.text, keyword)
            return pending.text

        config = self.context.config
        difficulty = settings.content.difficulty
        for attempt in range(1, self.max_generation_attempts + 1):
            phrase = await self.context.content.generate_phrase(
                keyword, config.user_lang, config.target_lang, difficulty
            )
            if phrase:
                self.context.progress.append_phrase(keyword, phrase)
                return phrase

            logger.warning(
                "No phrase generated for keyword %r (attempt %d/%d)",
                keyword, attempt, self.max_generation_attempts,
            )
            if attempt < self.max_generation_attempts:
                self.context.io.show_message("Could not get a phrase, trying again...", "yellow")
                await asyncio.sleep(self.retry_delay * attempt)

        raise GenerationError(
            f"No phrase generated for keyword {keyword!r} after {self.max_generation_attempts} attempts"
        )

    async def grade(self, user_input: str, phrase: str) -> Grade:
        """Grade an attempt. A failing grading service counts as a wrong answer."""
        config = self.context.config
        try:
            return await self.context.content.grade(user_input, phrase, config.user_lang, config.target_lang)
        except Exception as e:
            logger.error("Error grading user input: %s", e)
            return Grade(correct=False, lesson=GRADING_ERROR_LESSON)

    def _apply_grade(self, keyword: str, phrase: str, grade: Grade) -> Optional[LessonOutcome]:
        state = self.context.state
        progress = self.context.progress
        progress.record_attempt(keyword, phrase, grade.correct)

        if grade.correct:
            state.record_correct()
            self.context.io.show_correct(grade.lesson, state)
            return LessonOutcome.RESOLVED

        state.record_incorrect()
        if grade.lesson and grade.lesson != GRADING_ERROR_LESSON:
            progress.add_lesson(keyword, phrase, grade.lesson)
        self.context.io.show_incorrect(grade.lesson, state)
        if state.out_of_lives:
            logger.info("Out of lives on keyword %r", keyword)
            return LessonOutcome.GAME_OVER
        return None

    def _skip(self) -> LessonOutcome:
        self.context.state.reset_streak()
        self.context.io.show_message("Skipping this phrase. Moving to the next lesson.", "dim")
        return LessonOutcome.SKIPPED
