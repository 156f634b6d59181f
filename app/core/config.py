from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Resume Feedback Service"
    environment: str = "dev"
    debug: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    redis_url: str = "redis://redis:6379/0"
    database_url: str = "sqlite:///./data/resume_feedback.db"

    # memory | redis | sql
    record_store: str = "memory"
    record_prefix: str = "resume"

    storage_dir: Path = Path("data/uploads")
    max_upload_bytes: int = 20 * 1024 * 1024
    preview_scale: float = 4.0

    session_ttl_seconds: int = 3600
    max_sessions: int = 1000

    llm_provider: str = "mock"
    llm_model: str = "gpt-4o-mini"
    llm_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 1500
    llm_timeout_seconds: int = 90
    resume_text_max_chars: int = 20000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
