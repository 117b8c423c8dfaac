from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Database
    # Full URL wins over the POSTGRES_* parts (used for SQLite in tests)
    DATABASE_URL: str | None = None
    POSTGRES_HOST: str = "db"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "promptspace"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Teams
    # An owner leaving their own team is allowed unless this is switched off,
    # in which case another active owner must remain.
    ALLOW_OWNER_SELF_DEPARTURE: bool = True

    # Categories
    DEFAULT_CATEGORY_NAME: str = "Uncategorized"
    DEFAULT_CATEGORY_DESCRIPTION: str = "Default category for prompts without a category"
    DEFAULT_CATEGORY_COLOR: str = "#6b7280"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
