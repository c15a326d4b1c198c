"""Settings for the Order Service, read from the environment or a .env file."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration.

    Every field can be overridden with an ``ORDER_SERVICE_`` prefixed
    environment variable, e.g. ``ORDER_SERVICE_DATABASE_URL``.
    """

    app_name: str = "Order Service"

    # Database
    database_url: str = "sqlite:///./orders.db"
    echo_sql: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Pagination
    default_page_size: int = 15
    max_page_size: int = 100

    model_config = SettingsConfigDict(env_prefix="ORDER_SERVICE_", env_file=".env", case_sensitive=False)


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()


settings = get_settings()
