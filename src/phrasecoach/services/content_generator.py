"""Phrase generation, grading and explanation through the Formulaic API."""
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from phrasecoach.config import AppConfig, settings
from phrasecoach.models.session_models import Grade

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are a patient {{{targetLang}}} tutor for a {{{userLang}}} speaker.
{{{instructions}}}
Only provide plain text, no formatting."""

PHRASE_INSTRUCTIONS = (
    "Generate a {difficulty} difficulty phrase in {target} for a {user} speaker "
    "that uses or relates to the keyword \"{keyword}\". "
    "Only provide the phrase in the target language {target}."
)

GRADE_INSTRUCTIONS = (
    "The learner translated the {target} phrase \"{phrase}\" into {user} as \"{answer}\". "
    "Decide whether the translation keeps the meaning of the phrase. "
    "Answer with a JSON object only: "
    "{{\"correct\": true or false, \"lesson\": \"a short explanation in {user}\"}}"
)

EXPLAIN_INSTRUCTIONS = (
    "Explain the {target} phrase \"{phrase}\" to a {user} speaker: "
    "give its translation, the meaning of each important word and any grammar worth noticing. "
    "Write the explanation in {user}."
)


class ContentService(ABC):
    """Collaborator that produces phrases, grades and explanations."""

    @abstractmethod
    async def generate_phrase(self, keyword: str, user_lang: str, target_lang: str, difficulty: str) -> Optional[str]:
        """Get a new phrase for the keyword, or None when the caller should try again."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    async def grade(self, user_input: str, correct_phrase: str, user_lang: str, target_lang: str) -> Grade:
        """Grade a translation attempt. May raise."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    async def explain(self, phrase: str, user_lang: str, target_lang: str) -> Optional[str]:
        """Explain a phrase, or None when no explanation is available."""
        raise NotImplementedError("Subclasses must implement this method")

    async def create_formula(self) -> str:
        """Create the server-side prompt formula and return its id."""
        raise NotImplementedError("This service does not use formulas")

    async def close(self) -> None:
        """Release network resources."""


class FormulaicContentService(ContentService):
    """Content service backed by a Formulaic prompt formula."""

    def __init__(self, config: AppConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.client = client or httpx.AsyncClient(
            base_url=settings.content.base_url,
            timeout=settings.content.request_timeout,
        )
        self.client.headers["Authorization"] = f"Bearer {config.api_key}"

    async def close(self) -> None:
        await self.client.aclose()

    @staticmethod
    def _variables(**values: str) -> List[Dict[str, str]]:
        return [{"name": name, "value": value} for name, value in values.items()]

    async def create_formula(self) -> str:
        payload = {
            "name": "Language Learning Phrase Generator",
            "description": "Generates, grades and explains phrases in the target language.",
            "variables": self._variables(
                userLang=self.config.user_lang,
                targetLang=self.config.target_lang,
                instructions="",
            ),
            "model": settings.content.model,
            "prompts": [{"text": PROMPT_TEMPLATE}],
        }
        response = await self.client.post("/formulas", json=payload)
        response.raise_for_status()
        formula_id = response.json()["id"]
        logger.info("Created formula %s", formula_id)
        return str(formula_id)

    async def _complete(self, user_lang: str, target_lang: str, instructions: str, **extra: str) -> str:
        """Run the formula and return the last assistant message."""
        payload = {
            "models": [settings.content.model],
            "variables": self._variables(
                userLang=user_lang,
                targetLang=target_lang,
                instructions=instructions,
                **extra,
            ),
        }
        response = await self.client.post(f"/formulas/{self.config.formula_id}/completions", json=payload)
        response.raise_for_status()
        return self._assistant_content(response.json())

    @staticmethod
    def _assistant_content(data: Any) -> str:
        messages = data[0]["chat"]["messages"]
        replies = [message for message in messages if message.get("role") == "assistant"]
        if not replies:
            raise ValueError("Completion has no assistant message")
        return str(replies[-1].get("content") or "").strip()

    async def generate_phrase(self, keyword: str, user_lang: str, target_lang: str, difficulty: str) -> Optional[str]:
        instructions = PHRASE_INSTRUCTIONS.format(
            difficulty=difficulty, target=target_lang, user=user_lang, keyword=keyword
        )
        try:
            phrase = await self._complete(
                user_lang, target_lang, instructions, difficulty=difficulty, keyword=keyword
            )
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Error fetching new phrase for keyword %r: %s", keyword, e)
            return None
        return phrase or None

    async def grade(self, user_input: str, correct_phrase: str, user_lang: str, target_lang: str) -> Grade:
        instructions = GRADE_INSTRUCTIONS.format(
            target=target_lang, user=user_lang, phrase=correct_phrase, answer=user_input
        )
        content = await self._complete(
            user_lang, target_lang, instructions, userInput=user_input, correctPhrase=correct_phrase
        )
        return parse_grade(content)

    async def explain(self, phrase: str, user_lang: str, target_lang: str) -> Optional[str]:
        instructions = EXPLAIN_INSTRUCTIONS.format(target=target_lang, user=user_lang, phrase=phrase)
        explanation = await self._complete(user_lang, target_lang, instructions, phrase=phrase)
        return explanation or None


def parse_grade(content: str) -> Grade:
    """Parse a grading answer, tolerating code fences around the JSON."""
    match = re.search(r"\{.*\}", content, re.DOTALL)
    if not match:
        raise ValueError(f"Grading answer is not JSON: {content!r}")
    data = json.loads(match.group(0))
    correct = data.get("correct")
    if isinstance(correct, str):
        correct = correct.strip().lower() == "true"
    return Grade(correct=bool(correct), lesson=str(data.get("lesson") or ""))
