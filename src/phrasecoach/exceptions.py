"""Errors raised by the tutor."""


class PhraseCoachError(Exception):
    """Base class for all tutor errors."""


class NotFoundError(PhraseCoachError, ValueError):
    """A keyword or phrase expected in the progress data is missing."""


class PersistenceError(PhraseCoachError):
    """The progress file could not be read or written."""


class ConfigError(PhraseCoachError):
    """The config file is unusable or a required value is missing."""


class GenerationError(PhraseCoachError):
    """Phrase generation kept failing after all allowed attempts."""
