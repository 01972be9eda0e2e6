"""Configuration settings for the tutor."""
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Optional

from dotenv import load_dotenv

from phrasecoach.exceptions import ConfigError
from phrasecoach.file_utils import write_json_atomic

logger = logging.getLogger(__name__)

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
CONFIG_FILE = Path(os.getenv("CONFIG_FILE", str(DATA_DIR / "config.json")))

# Keywords practiced in order until every phrase under them is learned
DEFAULT_VOCABULARY = [
    "hello", "world", "language", "learn", "food",
    "water", "friend", "family", "help", "please",
]

EXHAUSTION_POLICIES = ("stop", "review")


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        CONFIG_FILE.parent,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def get_vocabulary() -> list[str]:
    """Get the keyword list from environment variable."""
    raw = os.getenv("VOCABULARY")
    if not raw:
        return list(DEFAULT_VOCABULARY)
    return [keyword.strip() for keyword in raw.split(",") if keyword.strip()]


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    config_file: Path = CONFIG_FILE


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "WARNING")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class ContentSettings:
    """Phrase generation and grading service settings."""
    base_url: str = os.getenv("FORMULAIC_BASE_URL", "https://formulaic.app/api")
    model: str = os.getenv("FORMULAIC_MODEL", "gpt-4o")
    difficulty: str = os.getenv("DIFFICULTY", "medium")
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "30"))
    max_generation_attempts: int = int(os.getenv("MAX_GENERATION_ATTEMPTS", "5"))
    generation_retry_delay: float = float(os.getenv("GENERATION_RETRY_DELAY", "1.0"))


@dataclass
class LearningSettings:
    """Learning process settings."""
    vocabulary: list[str] = field(default_factory=get_vocabulary)
    exhaustion_policy: str = os.getenv("EXHAUSTION_POLICY", "stop").lower()
    gamified: bool = _env_bool("GAMIFIED", "true")
    starting_lives: int = int(os.getenv("STARTING_LIVES", "3"))
    skip_token: str = os.getenv("SKIP_TOKEN", "skip")
    command_prefix: str = os.getenv("COMMAND_PREFIX", "/")


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_content_settings() -> ContentSettings:
    """Get content settings."""
    return ContentSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    content: ContentSettings = field(default_factory=get_content_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.learning.exhaustion_policy not in EXHAUSTION_POLICIES:
            raise ValueError(f"EXHAUSTION_POLICY must be one of {', '.join(EXHAUSTION_POLICIES)}")

        if self.learning.starting_lives < 1:
            raise ValueError("STARTING_LIVES must be positive")

        if not self.learning.vocabulary:
            raise ValueError("VOCABULARY must contain at least one keyword")

        if not self.learning.command_prefix:
            raise ValueError("COMMAND_PREFIX cannot be empty")

        if self.content.max_generation_attempts < 1:
            raise ValueError("MAX_GENERATION_ATTEMPTS must be positive")

        if self.content.generation_retry_delay < 0:
            raise ValueError("GENERATION_RETRY_DELAY cannot be negative")

        if self.content.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")


# Create global settings instance
settings = Settings()
settings.validate()


@dataclass
class AppConfig:
    """User configuration persisted in the config file."""
    user_lang: str = "en"
    target_lang: str = "es"
    schedule: int = 21600000  # 6 hours in milliseconds
    api_key: str = ""
    formula_id: str = ""
    data_file: str = str(DATA_DIR / "learned.json")

    # Field name -> key in the config file
    FILE_KEYS = {
        "user_lang": "userLang",
        "target_lang": "targetLang",
        "schedule": "schedule",
        "api_key": "apiKey",
        "formula_id": "formulaId",
        "data_file": "dataFile",
    }

    def to_dict(self) -> dict:
        return {self.FILE_KEYS[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        defaults = cls()
        values = {
            name: data.get(key, getattr(defaults, name))
            for name, key in cls.FILE_KEYS.items()
        }
        values["schedule"] = int(values["schedule"])
        return cls(**values)


class ConfigStore:
    """Loads and saves the user config file."""

    def __init__(self, path: Optional[Path] = None, ask: Optional[Callable[[str], str]] = None):
        self.path = Path(path) if path is not None else settings.paths.config_file
        self.ask = ask or input

    def load(self) -> AppConfig:
        """Load the config, creating defaults and asking for a missing API key."""
        if not self.path.exists():
            logger.warning("Config file not found at %s. Creating with default values...", self.path)
            config = AppConfig()
        else:
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Could not read config file {self.path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {self.path} must contain a JSON object")
            try:
                config = AppConfig.from_dict(data)
            except (ValueError, TypeError) as e:
                raise ConfigError(f"Invalid value in config file {self.path}: {e}") from e

        if not config.api_key:
            logger.warning("API key not found in config. Prompting user for input...")
            api_key = self.ask("Enter your Formulaic API key: ").strip()
            if not api_key:
                raise ConfigError("API key is required to run the application.")
            config.api_key = api_key
            self.save(config)

        return config

    def save(self, config: AppConfig) -> None:
        """Write the config to disk."""
        try:
            write_json_atomic(self.path, config.to_dict())
        except OSError as e:
            raise ConfigError(f"Could not save config file {self.path}: {e}") from e
