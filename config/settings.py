"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    AUDIO_DIR: str = Field(default="data/audio")
    PIPELINE_CONFIG: str = Field(default="config/pipeline.yaml")

    GROQ_API_KEY: str = ""
    GEMINI_API_KEY: str = ""

    ANSWER_RATE_LIMIT: int = 20
    ANSWER_RATE_WINDOW_S: float = 60.0
    DEFAULT_MIME_TYPE: str = "audio/webm"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
