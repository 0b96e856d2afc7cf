from functools import lru_cache

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Values come from the environment (or .env); names are case-insensitive."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    polihub_api_url: str = "http://localhost:5000"
    http_timeout_seconds: float = 10.0
    catalog_page_size: int = 12
    default_passing_score: float = 70
    quiz_xp_action: str = "quiz_completion"
    log_level: str = "INFO"
    log_dir: str = "logs"


@lru_cache
def get_settings() -> Settings:
    return Settings()
