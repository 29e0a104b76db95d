"""
Runtime configuration for learnpath.

Values come from the environment (prefix ``LEARNPATH_``) or a ``.env`` file
at the project root.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent

load_dotenv(PROJECT_ROOT / ".env")


DEFAULT_API_BASE_URL = "http://localhost:3000"
DEFAULT_DEBOUNCE_SECONDS = 2.0
DEFAULT_OPTIMISTIC_TTL_SECONDS = 15.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LEARNPATH_", extra="ignore")

    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: Optional[str] = None
    request_timeout: float = 10.0
    progress_debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    optimistic_ttl_seconds: float = DEFAULT_OPTIMISTIC_TTL_SECONDS
    user_id: Optional[str] = None
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
