"""Configuration settings for the company enrichment pipeline."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = base_dir / "data"
    db_path: Path = data_dir / "companies.db"
    rules_path: Optional[Path] = None

    # HTTP Client Settings
    user_agent: str = "CompanyEnricherBot/1.0 (+contact@example.org)"
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    request_delay_ms: int = 1000  # between external calls, and per host
    search_pause_ms: int = 200  # between unsuccessful search variants

    # Retry Settings
    max_retries: int = 3
    backoff_ms: int = 500

    # Wikipedia endpoints
    search_api_url: str = "https://en.wikipedia.org/w/api.php"
    rest_api_url: str = "https://en.wikipedia.org/api/rest_v1"
    article_base_url: str = "https://en.wikipedia.org/wiki"

    # Search Settings
    search_limit: int = 15
    search_strategy: str = "first"  # "first" confident variant, or "best" overall

    # Batch Settings
    concurrency: int = 1

    # Database URL
    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.db_path}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

# Ensure data directory exists
settings.data_dir.mkdir(parents=True, exist_ok=True)
