"""Library configuration using Pydantic Settings."""

import logging.config
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Repository layer settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra environment variables not defined in Settings
    )

    # Log level
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./repokit.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600

    # Logging Configuration
    LOGGING_CONFIG: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": "INFO",
            "handlers": ["console"],
        },
        "loggers": {
            "repokit": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    @property
    def is_sqlite(self) -> bool:
        """Whether DATABASE_URL points at a SQLite database."""
        return self.DATABASE_URL.startswith("sqlite")


def configure_logging(config: Settings | None = None) -> dict[str, Any]:
    """Apply the logging dictConfig from settings.

    LOG_LEVEL overrides the level of the root and ``repokit`` loggers so a
    single environment variable controls verbosity.

    Args:
        config: Settings to read from (defaults to the module-level settings)

    Returns:
        The dictConfig that was applied
    """
    config = config or settings
    logging_config = dict(config.LOGGING_CONFIG)
    level = config.LOG_LEVEL.upper()

    root = dict(logging_config.get("root", {}))
    root["level"] = level
    logging_config["root"] = root

    loggers = {name: dict(cfg) for name, cfg in logging_config.get("loggers", {}).items()}
    if "repokit" in loggers:
        loggers["repokit"]["level"] = level
    logging_config["loggers"] = loggers

    logging.config.dictConfig(logging_config)
    return logging_config


settings = Settings()
