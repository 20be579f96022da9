"""Application settings with environment variable support."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from pathlib import Path


# Compute base_dir at module level
_BASE_DIR = Path(__file__).parent.parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NA_",  # NA_DATABASE_URL, NA_REQUEST_PERIOD_MINUTES, etc.
    )

    # Paths - computed from base_dir
    base_dir: Path = _BASE_DIR
    data_dir: Path = _BASE_DIR / "data"
    feeds_path: Path = _BASE_DIR / "config" / "feeds.json"

    # Database
    database_url: str = f"sqlite:///{_BASE_DIR / 'data' / 'news.db'}"
    comments_database_url: str = f"sqlite:///{_BASE_DIR / 'data' / 'comments.db'}"

    # Ingestion
    enable_ingestion: bool = True
    request_period_minutes: float = 5.0
    fetch_timeout_seconds: int = 30
    fetch_max_concurrency: int = 5

    # News API
    items_per_page: int = 15

    # Downstream services
    news_service_url: str = "http://localhost:8082"
    comments_service_url: str = "http://localhost:8081"
    moderation_service_url: str = "http://localhost:8083/censor"
    downstream_timeout_seconds: float = 10.0
    moderation_timeout_seconds: float = 5.0

    # Moderation - comma separated
    forbidden_words: str = "qwerty,йцукен,zxvbnm"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def request_period_seconds(self) -> float:
        return self.request_period_minutes * 60

    @property
    def forbidden_word_list(self) -> List[str]:
        return [w.strip().lower() for w in self.forbidden_words.split(",") if w.strip()]


settings = Settings()
