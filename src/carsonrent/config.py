"""Configuration loaded from CARSONRENT_* environment variables."""

import os
from collections.abc import Mapping

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "CARSONRENT_"

logger = structlog.get_logger(__name__)


class Settings(BaseModel):
    """Runtime settings for the service and CLI."""

    database_url: str = ".carsonrent/carsonrent.db"
    search_path: str = ".carsonrent/search"
    search_host: str | None = None
    search_port: int = Field(default=8000, gt=0, lt=65536)
    collection_prefix: str = "carsonrent"
    application_name: str = "carsOnRentApp"
    log_level: str = "info"
    cors_origins: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        value = value.strip().lower()
        if value == "warn":
            value = "warning"
        if value not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError(f"unknown log level '{value}'")
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


def load_settings(environ: Mapping[str, str] | None = None, **overrides: object) -> Settings:
    """Build Settings from the environment, then apply explicit overrides.

    Args:
        environ: Mapping to read variables from (default: os.environ).
        **overrides: Field values that win over the environment; None values
            are ignored so CLI options left unset fall through.

    Returns:
        Validated Settings.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, object] = {}
    for name in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw.strip():
            values[name] = raw.strip()
    values.update({name: value for name, value in overrides.items() if value is not None})

    settings = Settings.model_validate(values)
    logger.debug(
        "settings_loaded",
        database_url=settings.database_url,
        search_path=settings.search_path,
        search_host=settings.search_host,
    )
    return settings
