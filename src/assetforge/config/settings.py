from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_url: str = "sqlite:///./data/assetforge.db"
    app_name: str = "assetforge"
    debug: bool = False
    log_level: str = "INFO"
    due_soon_window_days: int = 30
    initial_version_label: str = "1.0"
    dashboard_top_n: int = 10
    dashboard_max_workers: int = 4

    model_config = {"env_prefix": "ASSETFORGE_", "env_file": ".env"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
