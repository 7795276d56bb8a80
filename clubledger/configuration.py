"""Mini README: Centralised configuration for the club ledger tools.

Structure:
    * LedgerSettings - Pydantic settings model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read ``CLUBLEDGER_*`` environment variables
    (or a local ``.env`` file). Season start dates live here rather than in
    module constants; ``SeasonCalendar.from_settings`` turns them into the
    calendar object handed to the normalizer and projector.
"""

from __future__ import annotations

from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings

from .logging_utils import resolve_level


class LedgerSettings(BaseSettings):
    """Runtime configuration for the ledger engine and its surfaces."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the persisted ledger store.",
    )
    store_filename: str = Field(
        "ledger.json",
        description="File name of the JSON ledger store inside the data directory.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the API service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the API service exposes.",
        ge=1,
        le=65535,
    )
    season_starts: Dict[int, date] = Field(
        default_factory=lambda: {41: date(2022, 1, 4)},
        description="Known first day of each season, keyed by season id.",
    )
    season_length_days: int = Field(
        112,
        description="Season length used when the following season start is not listed.",
        gt=0,
    )
    strict_normalization: bool = Field(
        False,
        description="Raise on non-whole-day gaps instead of collecting them as faults.",
    )
    sync_marker: str = Field(
        "## finance-tools sync ##",
        description="Marker line separating user notes from the encoded ledger.",
    )
    sync_file: Optional[Path] = Field(
        None,
        description="Free-text file used by the file sync transport.",
    )
    log_level: str = Field(
        "INFO",
        description="Root logging level applied by the CLI and the API factory.",
    )

    class Config:
        env_prefix = "CLUBLEDGER_"
        env_file = ".env"
        case_sensitive = False

    @validator("data_directory", pre=True)
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @validator("log_level", pre=True)
    def _normalise_level(cls, value: str | int) -> str:
        """Accept level names in any case, or numbers, and reject unknown ones."""

        resolve_level(value)
        return str(value).strip().upper()

    @property
    def store_path(self) -> Path:
        """Location of the persisted JSON store."""

        return self.data_directory / self.store_filename


@lru_cache()
def get_settings() -> LedgerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return LedgerSettings()
