"""
Configuration settings using Pydantic Settings.
"""

from pathlib import Path
from pydantic import model_validator
from pydantic_settings import BaseSettings
from functools import lru_cache

import os

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY") or ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_MAX_OUTPUT_TOKENS: int = 1000
    GEMINI_TIMEOUT_SECONDS: float = 30.0

    # "leading_turn" injects the system message as the first user turn,
    # "system_instruction" sends it through the dedicated system channel.
    SYSTEM_PROMPT_STRATEGY: str = "leading_turn"

    DATABASE_PATH: str = "database/bots.db"

    HOST: str = "0.0.0.0"
    PORT: int = 5000

    RATE_LIMIT_WINDOW_SECONDS: int = 60
    IP_RATE_LIMIT: int = 100
    BOT_RATE_LIMIT: int = 60
    REDIS_URL: str = ""
    TRUST_PROXY_HEADERS: bool = False

    ADMIN_CORS_ORIGINS: list[str] = []
    DEFAULT_CREATED_BY: str = "admin"

    DEBUG: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }

    @model_validator(mode="after")
    def resolve_relative_paths(self):
        db_path = Path(self.DATABASE_PATH)
        if not db_path.is_absolute():
            self.DATABASE_PATH = str((BASE_DIR / db_path).resolve())

        strategy = self.SYSTEM_PROMPT_STRATEGY.strip().lower()
        if strategy not in {"leading_turn", "system_instruction"}:
            raise ValueError(f"Unknown SYSTEM_PROMPT_STRATEGY: {self.SYSTEM_PROMPT_STRATEGY}")
        self.SYSTEM_PROMPT_STRATEGY = strategy

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: Cached Settings instance
    :rtype: Settings
    """
    return Settings()


settings = get_settings()
