"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # SQL database (DATABASE_URL wins over the POSTGRES_* parts when set)
    database_url: str = ""
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "careerhub_user"
    postgres_password: str = "password"
    postgres_db: str = "careerhub_db"

    # MongoDB (GridFS storage buckets)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "careerhub_files"
    mongodb_timeout_ms: int = 5000

    # Gemini (resume AI assistant)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-pro"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # GitHub public API
    github_api_url: str = "https://api.github.com"
    http_timeout_seconds: float = 15.0

    # Base used to build public URLs for stored files
    public_base_url: str = "http://localhost:8000"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # App
    debug: bool = True
    log_level: str = "INFO"

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sqlalchemy_url(self) -> str:
        """URL handed to SQLAlchemy."""
        return self.database_url or self.postgres_url

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
