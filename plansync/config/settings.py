"""
Configuration Management for plansync

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: Settings are built once at process start by load_settings()
and handed to each component through its constructor. The models are frozen,
so nothing re-reads or mutates configuration behind a component's back.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_STORE_FILENAME = "iComptaBudgetData.sqlite"
DEFAULT_LEDGER_FILENAME = "Comptes.cdb"


class StoreSettings(BaseSettings):
    """Locations of the local store and the external ledger."""

    model_config = SettingsConfigDict(
        env_prefix="PLANSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding both database files"
    )
    store_path: Path = Field(
        default=Path("data") / DEFAULT_STORE_FILENAME,
        description="Local planning store (defaults to <data_dir>/iComptaBudgetData.sqlite)"
    )
    ledger_path: Path = Field(
        default=Path("data") / DEFAULT_LEDGER_FILENAME,
        description="External ledger file (defaults to <data_dir>/Comptes.cdb)"
    )

    # The desktop application may hold a lock on its file while saving
    ledger_read_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times to try reading a locked ledger"
    )
    ledger_retry_max_wait: float = Field(
        default=2.0,
        ge=0.0,
        le=30.0,
        description="Upper bound in seconds between ledger read attempts"
    )

    @model_validator(mode="before")
    @classmethod
    def fill_default_paths(cls, data):
        """Derive missing file paths from data_dir."""
        if isinstance(data, dict):
            data_dir = Path(data.get("data_dir") or "data")
            if not data.get("store_path"):
                data["store_path"] = data_dir / DEFAULT_STORE_FILENAME
            if not data.get("ledger_path"):
                data["ledger_path"] = data_dir / DEFAULT_LEDGER_FILENAME
        return data


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PLANSYNC_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (otherwise console format)"
    )


class Settings(BaseModel):
    """
    Root settings container.

    Aggregates all sub-settings so a single value can be passed around.
    """

    model_config = ConfigDict(frozen=True)

    store: StoreSettings = Field(default_factory=StoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(**store_overrides) -> Settings:
    """
    Build the process-wide settings value.

    Keyword arguments override StoreSettings fields, which is how the
    command line and the tests point the service at specific files.
    """
    store = StoreSettings(**store_overrides)
    return Settings(store=store, logging=LoggingSettings())
