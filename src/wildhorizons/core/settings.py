"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod

Storage locations
-----------------
- `SIGHTINGS_PATH`: the append-only sightings log (created on first write).
- `DESTINATIONS_PATH`: the read-only destinations catalog. When unset, the
  catalog bundled with the package (`wildhorizons/data/destinations.json`)
  is served.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

BUNDLED_DESTINATIONS: Path = Path(__file__).resolve().parent.parent / "data" / "destinations.json"


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `WILDHORIZONS_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    sightings_path : Path
        JSON file backing the sightings log; maps from `SIGHTINGS_PATH`.
    destinations_path : Path | None
        JSON file backing the destinations catalog; maps from `DESTINATIONS_PATH`.
    host, port : str, int
        Bind address for `wildhorizons serve` and the ASGI entry point.
    json_indent : int
        Indentation used when persisting snapshots.
    """

    environment: EnvName = Field(default="dev", alias="WILDHORIZONS_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    sightings_path: Path = Field(default=Path("data") / "sightings.json", alias="SIGHTINGS_PATH")
    destinations_path: Path | None = Field(default=None, alias="DESTINATIONS_PATH")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, ge=1, le=65535, alias="PORT")
    json_indent: int = Field(default=2, ge=0, alias="JSON_INDENT")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    @property
    def catalog_path(self) -> Path:
        """Return the destinations file actually served."""
        return self.destinations_path or BUNDLED_DESTINATIONS

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("WILDHORIZONS_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "wildhorizons") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
