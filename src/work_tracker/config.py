"""Configuration management for the work tracker."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

DOCUMENT_BACKENDS = frozenset({"memory", "sql", "firestore"})


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment.

    Attributes:
        document_backend: Where user documents live ("memory", "sql" or
            "firestore").
        database_url: SQLAlchemy async URL used by the "sql" backend.
        firebase_project_id: Firebase project for Firestore and Auth. None lets
            Application Default Credentials decide.
        users_collection: Firestore collection / SQL namespace holding one
            document per user.
        persist_debounce_seconds: Quiet period before a burst of edits is
            written back as a single snapshot.
        log_level: Root logging level name.
    """

    document_backend: str = "memory"
    database_url: str = "sqlite+aiosqlite:///work_tracker.db"
    firebase_project_id: str | None = None
    users_collection: str = "users"
    persist_debounce_seconds: float = 0.5
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.document_backend not in DOCUMENT_BACKENDS:
            raise ValueError(f"document_backend must be one of {sorted(DOCUMENT_BACKENDS)}")
        if not self.users_collection or "/" in self.users_collection:
            raise ValueError("users_collection is required and must not contain '/'")
        if self.persist_debounce_seconds < 0:
            raise ValueError("persist_debounce_seconds cannot be negative")
        if self.persist_debounce_seconds > 60:
            raise ValueError("persist_debounce_seconds cannot exceed 60")

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            document_backend=os.getenv("WORK_TRACKER_BACKEND", "memory").strip().lower(),
            database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///work_tracker.db"),
            firebase_project_id=(
                os.getenv("FIREBASE_PROJECT_ID") or os.getenv("GOOGLE_CLOUD_PROJECT") or None
            ),
            users_collection=os.getenv("USERS_COLLECTION", "users"),
            persist_debounce_seconds=float(os.getenv("PERSIST_DEBOUNCE_SECONDS", "0.5")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
