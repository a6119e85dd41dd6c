"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database (PostgreSQL in production, SQLite works locally)
    database_url: Optional[str] = None
    fallback_database_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("fallback_database_url", "netlify_database_url"),
    )

    # Connection pool
    db_pool_size: int = 10
    db_pool_timeout: int = 10     # seconds to wait for a free connection
    db_pool_recycle: int = 30     # seconds before an idle connection is replaced

    # Admin accounts
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_emails: List[str] = ["admin@example.com"]

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    # Client session lifecycle
    session_timeout_seconds: int = 300
    session_warning_seconds: int = 60

    # Server-side listing capacity (unset = not enforced)
    max_listings: Optional[int] = None

    # App
    debug: bool = False
    environment: str = "production"
    log_level: str = "INFO"

    @property
    def resolved_database_url(self) -> str:
        """Primary connection string, falling back to the alternate one."""
        url = self.database_url or self.fallback_database_url
        if not url:
            raise RuntimeError("DATABASE_URL environment variable is not set")
        return url

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def admin_allow_list(self) -> set:
        """Case-folded set of emails that get the admin role."""
        emails = {e.strip().lower() for e in self.admin_emails if e.strip()}
        if self.admin_email:
            emails.add(self.admin_email.strip().lower())
        return emails

    def is_admin_email(self, email: str) -> bool:
        return email.strip().lower() in self.admin_allow_list()

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
