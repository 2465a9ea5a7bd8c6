"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SKILLFORGE_",
        extra="ignore",
    )

    # App
    APP_NAME: str = "SkillForge Roadmaps"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENV: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Backend REST API
    API_BASE_URL: str = "http://localhost:5000/api"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Workflow polling (seconds)
    POLL_INTERVAL_FAST: float = 3.0
    POLL_INTERVAL_NORMAL: float = 5.0
    POLL_INTERVAL_SLOW: float = 10.0
    POLL_BUDGET_SECONDS: float = 300.0

    # Generation defaults
    DEFAULT_LEVEL: str = "intermediate"
    DEFAULT_TIMEFRAME_WEEKS: int = 4
    DEFAULT_DAILY_TIME_MINUTES: int = 60
    DEFAULT_FOCUS: str = "practical"
    ENABLE_WEB_SCRAPING: bool = True

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
