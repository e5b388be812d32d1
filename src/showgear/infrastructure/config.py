from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHOWGEAR_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # JSON files for equipment, productions and reservations live here.
    data_dir: Path = Path("data")

    environment: str = "development"
    log_level: str = "WARNING"

    # Batch duplication limits.  A timeout of 0 waits on each copy indefinitely.
    max_copies: int = 50
    create_timeout_seconds: float = 10.0


@lru_cache
def get_settings() -> Settings:
    return Settings()
