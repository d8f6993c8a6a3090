import os
import logging
import sys

import structlog

from exceptions import ConfigurationError, ValidationError
from tally.validation import clean_value

logger = logging.getLogger("votetally")


def get_logger(name: str = "votetally"):
    """Get a structured logger instance

    Usage:
        logger = get_logger(__name__)
        logger = logger.bind(component="store")
        logger.info("vote recorded", subject_id="p1", vote="yes")

    Args:
        name: Logger name (typically __name__ or module path)

    Returns:
        Structured logger instance with context binding support
    """
    return structlog.get_logger(name)


class Config:
    """Configuration management for votetally"""

    def __init__(self):
        # API configuration
        self.API_HOST = os.getenv("TALLY_HOST", "0.0.0.0")
        self.API_PORT = self._parse_int("TALLY_PORT", "8080")
        self.DEBUG = os.getenv("TALLY_DEBUG", "false").lower() == "true"

        # CORS settings - any origin unless narrowed
        self.ALLOWED_ORIGINS = self._parse_list(os.getenv("TALLY_ALLOWED_ORIGINS", "*"))

        # Vote input limits
        self.MAX_ID_LENGTH = self._parse_int("TALLY_MAX_ID_LENGTH", "128")
        self.MAX_VOTE_LENGTH = self._parse_int("TALLY_MAX_VOTE_LENGTH", "64")

        # Subjects registered with empty tallies at startup
        self.SEED_SUBJECTS = self._parse_list(os.getenv("TALLY_SEED_SUBJECTS", ""))

        # Static index page served at /index.html
        default_index_path = os.path.join(
            os.path.dirname(os.path.abspath(__file__)), "static", "index.html"
        )
        self.INDEX_PATH = os.getenv("TALLY_INDEX_PATH", default_index_path)

        # Logging
        self.LOG_LEVEL = os.getenv("TALLY_LOG_LEVEL", "INFO").upper()

        # Validate configuration
        self._validate()

    def _parse_int(self, key: str, default: str) -> int:
        """Read an integer environment variable"""
        raw = os.getenv(key, default)
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got {raw!r}", config_key=key)

    def _parse_list(self, values_str: str) -> list:
        """Parse comma-separated string"""
        if not values_str:
            return []
        return [value.strip() for value in values_str.split(",") if value.strip()]

    def _validate(self):
        """Validate configuration values"""
        if self.API_PORT <= 0 or self.API_PORT > 65535:
            raise ConfigurationError("TALLY_PORT must be between 1 and 65535", config_key="TALLY_PORT")

        if self.MAX_ID_LENGTH <= 0:
            raise ConfigurationError("TALLY_MAX_ID_LENGTH must be positive", config_key="TALLY_MAX_ID_LENGTH")

        if self.MAX_VOTE_LENGTH <= 0:
            raise ConfigurationError("TALLY_MAX_VOTE_LENGTH must be positive", config_key="TALLY_MAX_VOTE_LENGTH")

        self._validate_seed_subjects()

        if self.LOG_LEVEL not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"Unknown TALLY_LOG_LEVEL: {self.LOG_LEVEL}", config_key="TALLY_LOG_LEVEL")

        if not os.path.exists(self.INDEX_PATH):
            logger.warning("Index page not found at %s - /index.html will return 404", self.INDEX_PATH)

    def _validate_seed_subjects(self):
        """Apply the store's subject id rules to TALLY_SEED_SUBJECTS"""
        for subject_id in self.SEED_SUBJECTS:
            try:
                clean_value(subject_id, "subject_id", self.MAX_ID_LENGTH)
            except ValidationError as e:
                raise ConfigurationError(
                    f"Invalid TALLY_SEED_SUBJECTS entry: {e.message}",
                    config_key="TALLY_SEED_SUBJECTS",
                ) from e

    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.DEBUG

    def summary(self) -> dict:
        """Get a summary of current configuration"""
        return {
            "api_host": self.API_HOST,
            "api_port": self.API_PORT,
            "debug": self.DEBUG,
            "allowed_origins": self.ALLOWED_ORIGINS,
            "max_id_length": self.MAX_ID_LENGTH,
            "max_vote_length": self.MAX_VOTE_LENGTH,
            "seed_subjects_count": len(self.SEED_SUBJECTS),
            "index_path": self.INDEX_PATH,
            "log_level": self.LOG_LEVEL,
            "is_development": self.is_development(),
        }


def configure_structlog(is_development: bool = False, log_level: str = "INFO"):
    """Configure structlog for structured logging

    Args:
        is_development: If True, use human-readable console output. If False, use JSON.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if is_development:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )


# Global configuration instance
config = Config()

configure_structlog(
    is_development=config.is_development(),
    log_level=config.LOG_LEVEL
)
