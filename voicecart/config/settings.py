"""
VoiceCart Configuration Settings
Environment-driven, cached once per process
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "VoiceCart"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # ============== LIST STORE ==============
    # "memory" keeps the list in process, "database" uses SQLAlchemy
    STORE_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./voicecart.db"

    # ============== SUGGESTIONS ==============
    SUGGESTIONS_ENABLED: bool = True
    SUGGESTION_PROVIDER: str = "rules"  # "rules" or "openai"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    SUGGESTION_TIMEOUT_SECONDS: float = 5.0
    SUGGESTION_HISTORY_LIMIT: int = 200

    # ============== VOICE ==============
    SPEECH_LANGUAGE: str = "en-US"
    COMMAND_HISTORY_LIMIT: int = 100

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
