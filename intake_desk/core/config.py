"""Application configuration using Pydantic Settings."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "IntakeDesk"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Remote backend. When set, every store, function, auth and upload call
    # is forwarded to it instead of the local document.
    api_base_url: str = Field(default="", alias="INTAKE_API_URL")
    http_timeout_seconds: float | None = Field(default=None, ge=0)

    @property
    def remote_enabled(self) -> bool:
        """Check if a remote backend is configured."""
        return bool(self.api_base_url.strip())

    # Local persistence
    storage_backend: Literal["file", "memory", "sql"] = "file"
    storage_dir: Path = Path(".intake_data")
    storage_key: str = "lawyer_ai_intake_db_v1"
    session_key: str = "lawyer_ai_intake_user_v1"

    # Database (storage_backend == "sql")
    database_url: str = Field(default="sqlite+aiosqlite:///./intake_desk.db")
    database_echo: bool = False  # Log SQL queries

    # Demo identity
    demo_user_email: str = "demo@lawyerai.local"
    demo_user_name: str = "Demo User"

    # Firm provisioned for a user without one
    default_firm_name: str = "Demo Law Firm"
    default_firm_slug: str = "demo-law-firm"
    default_practice_areas: list[str] = Field(default_factory=lambda: ["Family Law"])
    default_follow_up_days: int = Field(default=3, ge=1)

    # Urgency heuristic
    urgency_keywords: list[str] = Field(
        default_factory=lambda: [
            "urgent",
            "court",
            "deadline",
            "eviction",
            "violence",
            "restraining",
            "police",
            "custody",
        ]
    )
    urgency_high_threshold: int = Field(default=3, ge=1)
    urgency_medium_threshold: int = Field(default=2, ge=1)

    # Gateway
    api_prefix: str = "/api"
    allowed_origins_str: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        alias="ALLOWED_ORIGINS",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse allowed origins from string."""
        origins = self.allowed_origins_str
        if origins.startswith("["):
            try:
                return json.loads(origins)
            except json.JSONDecodeError:
                pass
        return [o.strip() for o in origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
