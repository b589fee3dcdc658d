"""
Tool settings using Pydantic.

Provides environment-based configuration of toolsconf itself with the
TOOLSCONF_ prefix (where to look for the default config file, log level).
"""

from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_CONFIG_DIR = "/etc/dbtools"
DEFAULT_CONFIG_NAME = "dbtools"


class Settings(BaseSettings):
    """Tool settings."""

    # Default config file lookup
    config_dirs: list[str] = [DEFAULT_CONFIG_DIR]
    config_name: str = DEFAULT_CONFIG_NAME

    # Logging
    log_level: str = "WARNING"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "TOOLSCONF_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
