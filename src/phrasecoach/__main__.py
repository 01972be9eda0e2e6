"""Main entry point for the tutor."""
import logging
import sys

from phrasecoach.app import PhraseCoach
from phrasecoach.config import ensure_directories
from phrasecoach.exceptions import PhraseCoachError
from phrasecoach.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    """Run one practice session and return the process exit code."""
    ensure_directories()
    setup_logging("Starting PhraseCoach ...")

    try:
        PhraseCoach().run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except PhraseCoachError as e:
        logger.error("Fatal error: %s", e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
