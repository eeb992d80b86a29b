"""
Runtime configuration.
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, overridable via VOIDLOOT_* environment variables."""

    # API
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = True
    CORS_ORIGINS: List[str] = ["*"]

    # Simulation
    DEFAULT_SIMULATION_COUNT: int = 100
    MAX_SIMULATION_COUNT: int = 1000
    SIMULATION_WORKERS: int = 4

    # Live battle pacing (seconds between actions)
    ACTION_DELAY: float = 1.0

    # Persistence
    SAVE_DIR: Path = Path.home() / ".voidloot" / "saves"
    SAVE_SLOT_COUNT: int = 3

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(env_prefix="VOIDLOOT_", env_file=".env", extra="ignore")


settings = Settings()
