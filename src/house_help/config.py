"""Configuration management for the house help tracker."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from house_help.ledger.backends import STORAGE_KEY


def _split_emails(raw: str) -> tuple[str, ...]:
    return tuple(e.strip().lower() for e in raw.split(",") if e.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    admin_emails: tuple[str, ...]
    shared_owner_key: str
    restrict_sign_in: bool
    identity_header: str
    app_url: str | None
    share_link_days: int
    ledger_path: str
    sync_url: str | None
    sync_token: str | None
    sync_debounce_ms: int
    host: str
    port: int
    debug: bool
    log_level: str

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./house_help.db"),
            admin_emails=_split_emails(os.getenv("ADMIN_EMAILS", "")),
            shared_owner_key=os.getenv("SHARED_OWNER_KEY", "house_help_admin_sync"),
            restrict_sign_in=os.getenv("RESTRICT_SIGN_IN", "false").lower() == "true",
            identity_header=os.getenv("IDENTITY_HEADER", "X-Forwarded-Email"),
            app_url=(os.getenv("APP_URL") or "").rstrip("/") or None,
            share_link_days=int(os.getenv("SHARE_LINK_DAYS", "30")),
            ledger_path=os.getenv("LEDGER_PATH", f"~/.house_help/{STORAGE_KEY}.json"),
            sync_url=(os.getenv("SYNC_URL") or "").rstrip("/") or None,
            sync_token=os.getenv("SYNC_TOKEN") or None,
            sync_debounce_ms=int(os.getenv("SYNC_DEBOUNCE_MS", "1000")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
