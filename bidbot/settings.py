"""Application settings using Pydantic Settings."""

import tempfile
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration with environment variable support.

    Instances are frozen: build one at startup and pass it into the
    components that need it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Portal
    portal_base_url: str = Field(
        default="https://v3bl.goszakup.gov.kz",
        description="Base URL of the procurement portal",
    )
    portal_cookie: str = Field(
        default="", description="Session cookie header produced by the auth layer"
    )
    portal_timeout_seconds: float = Field(
        default=30.0, ge=1.0, le=300.0, description="Portal request timeout"
    )
    favorites_path: str = Field(
        default="/ru/favorites", description="Favorites page path"
    )
    favorites_delete_path: str = Field(
        default="/ru/favorites/fav/", description="Favorites removal endpoint path"
    )

    # Announce monitor
    announce_monitor_enabled: bool = Field(
        default=True, description="Enable the favorites monitor loop"
    )
    monitor_interval_seconds: float = Field(
        default=30.0, ge=1.0, le=3600.0, description="Delay between monitor cycles"
    )
    lock_ttl_hours: int = Field(
        default=24, ge=1, le=168, description="Lifetime of a processing lock"
    )
    main_app_port: int = Field(
        default=3000, description="Port of the local application service"
    )
    submission_fallback_timeout_seconds: float = Field(
        default=300.0, ge=1.0, description="Timeout of the HTTP fallback submission"
    )
    remove_submitted_favorites: bool = Field(
        default=True, description="Remove an announcement from favorites after submission"
    )

    # Dedup store
    dedup_backend: Literal["memory", "sql"] = Field(
        default="memory", description="Processing lock storage backend"
    )
    database_url: str = Field(
        default="sqlite:///data/bidbot.db",
        description="SQLAlchemy URL for the sql dedup backend",
    )

    # Signing (NCANode)
    ncanode_url: str = Field(
        default="http://localhost:14579", description="NCANode service URL"
    )
    cert_path: str = Field(default="", description="Path to the signing key store")
    cert_password: str = Field(default="", description="Password of the key store")
    enable_cert_cache: bool = Field(
        default=True, description="Cache the base64 key store in the dedup store"
    )
    sign_with_tsp: bool = Field(
        default=True, description="Request a timestamp token for CMS signatures"
    )
    signer_timeout_seconds: float = Field(
        default=60.0, ge=1.0, description="Signer request timeout"
    )

    # File processing
    temp_dir: Path = Field(
        default=Path(tempfile.gettempdir()) / "goszakup-files",
        description="Working directory for downloaded and signed files",
    )
    resolve_timeout_seconds: float = Field(
        default=30.0, ge=1.0, description="Timeout for document link resolution"
    )
    download_timeout_seconds: float = Field(
        default=60.0, ge=1.0, description="Timeout for document download"
    )
    upload_timeout_seconds: float = Field(
        default=60.0, ge=1.0, description="Timeout for signed file upload"
    )
    max_parallel_tasks: int = Field(
        default=9, ge=1, le=9, description="Maximum tasks per parallel batch"
    )

    # Telegram notifications
    telegram_enabled: bool = Field(default=True, description="Send Telegram messages")
    telegram_bot_token: Optional[str] = Field(default=None, description="Bot token")
    telegram_chat_id: Optional[str] = Field(default=None, description="Target chat id")
    telegram_timeout_seconds: float = Field(
        default=10.0, ge=1.0, description="Telegram API timeout"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_file: Optional[Path] = Field(
        default=None, description="Optional log file path"
    )

    @property
    def fallback_submission_url(self) -> str:
        """URL of the local HTTP endpoint that starts an application."""
        return f"http://localhost:{self.main_app_port}/api/applications/start"

    @property
    def lock_ttl_seconds(self) -> int:
        return self.lock_ttl_hours * 3600


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, applying explicit overrides."""
    return Settings(**overrides)
