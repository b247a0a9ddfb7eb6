"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields.  A
``Settings`` instance is handed to ``create_app`` which attaches it to
the application state; services receive the values they need at
construction and never read the environment themselves.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "EventHub API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_bool("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    # Issued tokens are valid for one hour unless overridden.
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "eventhub.db")
    # Seconds a store call waits on a locked database before failing.
    db_timeout_seconds: float = float(os.getenv("DB_TIMEOUT_SECONDS", "5"))

    # Events dated within this many days from now can no longer be cancelled.
    cancellation_lead_days: int = int(os.getenv("CANCELLATION_LEAD_DAYS", "7"))
    # When false, any authenticated user may cancel any event.
    cancel_requires_creator: bool = _env_bool("CANCEL_REQUIRES_CREATOR", "true")

    top_events_limit: int = int(os.getenv("TOP_EVENTS_LIMIT", "5"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
