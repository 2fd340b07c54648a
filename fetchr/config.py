"""
Configuration for fetchr.

Defaults live as module constants; each one can be overridden through a
``FETCHR_*`` environment variable. ``get_settings()`` collects them into a
validated ``Settings`` model.
"""

import logging
import os
from functools import lru_cache

from pydantic import BaseModel


# SQLite database URL - file-based storage
DEFAULT_DATABASE_URL = "sqlite:///./fetchr.db"

# Outbound request timeout in seconds
DEFAULT_REQUEST_TIMEOUT = 30.0

# Number of history entries kept in the client-side mirror
DEFAULT_HISTORY_LIMIT = 50

DEFAULT_LOG_LEVEL = "INFO"

# Where RemoteBackend finds the fetchr API
DEFAULT_API_BASE_URL = "http://127.0.0.1:8000"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseModel):
    """Runtime settings resolved from the environment."""
    database_url: str = DEFAULT_DATABASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    history_limit: int = DEFAULT_HISTORY_LIMIT
    log_level: str = DEFAULT_LOG_LEVEL
    api_base_url: str = DEFAULT_API_BASE_URL


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """
    Build settings from ``FETCHR_*`` variables.

    Args:
        environ: Mapping to read from, defaults to ``os.environ``

    Returns:
        Validated Settings instance
    """
    environ = os.environ if environ is None else environ
    overrides = {}
    for field in Settings.model_fields:
        value = environ.get(f"FETCHR_{field.upper()}")
        if value is not None:
            overrides[field] = value
    return Settings(**overrides)


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the application."""
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
