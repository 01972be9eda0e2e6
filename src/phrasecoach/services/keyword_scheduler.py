"""Service for choosing the next keyword to practice."""
import logging
import random
from typing import Optional, Sequence

from phrasecoach.config import settings
from phrasecoach.services.progress_store import ProgressStore

logger = logging.getLogger(__name__)


class KeywordScheduler:
    """Picks keywords in vocabulary order until all of them are learned.

    Once nothing is left to learn the scheduler either reports exhaustion
    (policy ``stop``) or draws a random known keyword for review (policy
    ``review``).
    """

    def __init__(self, exhaustion_policy: Optional[str] = None, rng: Optional[random.Random] = None):
        self.exhaustion_policy = exhaustion_policy or settings.learning.exhaustion_policy
        if self.exhaustion_policy not in ("stop", "review"):
            raise ValueError(f"Unknown exhaustion policy: {self.exhaustion_policy}")
        self.rng = rng or random.Random()

    def next(self, progress: ProgressStore, vocabulary: Sequence[str]) -> Optional[str]:
        """Get the next keyword, or None when everything is learned."""
        for keyword in vocabulary:
            if progress.has_unlearned_content(keyword):
                logger.debug("Next keyword with unlearned content: %r", keyword)
                return keyword

        if self.exhaustion_policy == "stop":
            logger.info("All %d keywords learned", len(vocabulary))
            return None

        known = progress.keywords()
        if not known:
            return None
        keyword = self.rng.choice(known)
        logger.debug("All keywords learned, reviewing %r", keyword)
        return keyword
