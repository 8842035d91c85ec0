"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://127.0.0.1:27017"
    mongodb_db: str = "pms"

    # Environment name ("production" hides reset tokens from responses)
    node_env: str = "development"

    # Public frontend URL used to build reset links
    client_url: str = "http://localhost:3000"

    # Mail (SMTP). Reset emails are only dispatched when user + pass are set.
    email_user: str = ""
    email_pass: str = ""
    email_smtp_host: str = "smtp.gmail.com"
    email_smtp_port: int = 465
    email_smtp_timeout_seconds: int = 10
    email_from: str = ""

    # Credentials
    password_hash_rounds: int = 10
    reset_token_expire_minutes: int = 60

    # App
    run_migrations: bool = True
    log_level: str = "INFO"
    debug: bool = True

    @field_validator("mongodb_uri")
    @classmethod
    def strip_quotes(cls, value: str) -> str:
        """.env values are sometimes written quoted; drop the quotes."""
        return value.strip().strip("'\"")

    @property
    def is_production(self) -> bool:
        return self.node_env.lower() == "production"

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_pass)

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
