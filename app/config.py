"""Configuration settings for Aurora application."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Model provider (any OpenAI-compatible chat completions endpoint)
    openai_api_key: str = ""
    ai_base_url: str = "https://api.openai.com/v1"
    ocr_model: str = "gpt-4o-mini"
    analysis_model: str = "gpt-4o"
    assistant_model: str = "gpt-4o-mini"
    threat_model: str = "gpt-4o-mini"
    request_timeout_seconds: float = 120.0

    # Database (empty URL keeps records in memory)
    database_url: str = ""

    # Storage
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    app_name: str = "Aurora"
    app_version: str = "0.1.0"

    # Processing
    max_chunk_size: int = 50_000
    chunk_delay_seconds: float = 0.5
    max_clauses: int = 20
    processing_timeout_seconds: float = 600.0
    poll_interval_seconds: float = 2.0

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def uses_database(self) -> bool:
        return bool(self.database_url)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
