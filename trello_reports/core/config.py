"""Application settings loaded from environment variables and `.env`."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Trello OAuth 1.0a consumer
    TRELLO_API_KEY: str = Field(default="")
    TRELLO_API_SECRET: str = Field(default="")
    TRELLO_API_BASE_URL: str = Field(default="https://api.trello.com/1")
    TRELLO_CALLBACK_URL: str = Field(default="http://127.0.0.1:5001/callback")
    TRELLO_APP_NAME: str = Field(default="Trello Reporting Agent")

    # Text generation
    LLM_PROVIDER: str = Field(default="groq")
    GROQ_API_KEY: str = Field(default="")
    GROQ_MODEL: str = Field(default="llama-3.3-70b-versatile")
    FOUNDRY_API_KEY: str = Field(default="")
    FOUNDRY_API_URL: str = Field(default="")
    FOUNDRY_MODEL: str = Field(default="Llama-4-Maverick-17B-128E-Instruct-FP8")
    FOUNDRY_API_VERSION: str = Field(default="2024-05-01-preview")

    # Report agent
    REPORTS_DIR: str = Field(default="./data/reports")
    REPORT_WEEKLY: bool = Field(default=True)
    REPORT_MONTHLY: bool = Field(default=True)
    AGENT_AUTOSTART: bool = Field(default=True)
    AGENT_CHECK_INTERVAL_HOURS: int = Field(default=24)

    # Web
    SESSION_SECRET_KEY: str = Field(default="trello-oauth-secret-key")
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173"]
    )
    LOG_LEVEL: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
