"""
Core configuration module for the application.
Handles environment variables and application settings.
"""

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # API Settings
    PROJECT_NAME: str = "Sample App"
    LOG_LEVEL: str = "INFO"

    # Database Settings
    DB_TYPE: str = "sqlite"  # Options: sqlite, mysql
    MYSQL_HOST: str = "localhost"
    MYSQL_PORT: int = 3306
    MYSQL_USER: str = "user"
    MYSQL_PASSWORD: str = "password"
    MYSQL_DB: str = "sample_app"
    SQLITE_DB: str = "sample_app.db"  # SQLite database file name

    # Redis Settings
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    # Session token settings
    SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Pagination
    USERS_PER_PAGE: int = 30
    MICROPOSTS_PER_PAGE: int = 30

    # Validation limits
    NAME_MAX_LENGTH: int = 50
    PASSWORD_MIN_LENGTH: int = 6
    MICROPOST_MAX_LENGTH: int = 140

    model_config = ConfigDict(
        case_sensitive=True,
        env_file=".env"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Export settings instance
settings = get_settings()
