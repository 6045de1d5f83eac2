"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings

from propcalc.calculations.units import AmountUnit


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Rental Property Calculator"
    debug: bool = False
    log_level: str = "INFO"

    # Front-end dev servers allowed to call the API
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:5175",
    ]

    # Denomination assumed when a request does not specify one
    default_unit: AmountUnit = AmountUnit.yen

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
