"""Mini README: Centralised configuration for the envelopes ledger.

Structure:
    * EnvelopesSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read ``ENVELOPES_*`` environment variables (or
    a ``.env`` file) for the snapshot directory, display formats, and the
    JSON interface bind address. Validation runs once per process.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings

from .formatting import BudgetSettings, CurrencyISOCode, DateFormat


class EnvelopesSettings(BaseSettings):
    """Runtime configuration for the envelopes ledger."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory where budget snapshots are stored.",
    )
    default_budget_name: str = Field(
        "My Budget",
        description="Name given to a budget created when no snapshot exists yet.",
    )
    currency_code: CurrencyISOCode = Field(
        CurrencyISOCode.USD,
        description="ISO code selecting the currency display preset.",
    )
    date_format: str = Field(
        "YYYY-MM-DD",
        description="Date display pattern, e.g. DD/MM/YYYY.",
    )
    interface_host: str = Field(
        "127.0.0.1",
        description="Network interface the JSON interface binds to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the JSON interface exposes.",
        ge=1,
        le=65535,
    )
    log_level: str = Field("INFO", description="Root logging level.")
    snapshot_name: Optional[str] = Field(
        None,
        description="Snapshot file inside the data directory; defaults to budget.json.",
    )

    class Config:
        env_prefix = "ENVELOPES_"
        env_file = ".env"
        case_sensitive = False

    @validator("data_directory", pre=True)
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @validator("date_format")
    def _known_date_format(cls, value: str) -> str:
        DateFormat(value)
        return value

    @property
    def snapshot_path(self) -> Path:
        return self.data_directory / (self.snapshot_name or "budget.json")

    def budget_settings(self) -> BudgetSettings:
        return BudgetSettings.for_locale(self.currency_code.value, self.date_format)


@lru_cache()
def get_settings() -> EnvelopesSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return EnvelopesSettings()
