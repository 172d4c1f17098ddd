"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL (users, companies, jobs)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "aerojob_user"
    postgres_password: str = "password"
    postgres_db: str = "aerojob_db"

    # MongoDB (surveys, survey responses, search logs)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "aerojob_docs"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7

    # Email (SMTP). Leave smtp_host empty to log emails instead of sending.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_ssl: bool = False
    smtp_timeout_seconds: int = 15
    email_from: str = "AeroJob <no-reply@aerojob.app>"

    # Admin seed account (scripts/seed_admin.py)
    admin_email: str = "admin@aerojob.com"
    admin_password: str = "Admin123!"
    admin_first_name: str = "Site"
    admin_last_name: str = "Admin"
    reseed_admin: bool = False

    # App
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    debug: bool = True

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host)

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
