# This file defines runtime settings for the hotel sync layer.
# It exists so store credentials, table names, and worker limits are configured without code edits.
# Table names are validated as SQL identifiers because they are interpolated into statements.
# A missing store endpoint or key is raised as ConfigurationError so callers can log or map it.

from __future__ import annotations

import os
import re

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from src.sync.errors import ConfigurationError

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class SyncConfig(BaseModel):
    """Typed sync runtime configuration."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    store_url: str
    store_key: str
    hotels_table_name: str = "hotels"
    services_table_name: str = "services"
    hotels_services_table_name: str = "hotels_services"
    max_workers: int = 4

    @field_validator("hotels_table_name", "services_table_name", "hotels_services_table_name")
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(f"Unsafe SQL identifier: {value!r}")
        return value

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_workers must be greater than 0.")
        return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def load_sync_config(*, load_env: bool = True) -> SyncConfig:
    """Load sync configuration from `.env` and process environment."""

    if load_env:
        load_dotenv()

    store_url = os.getenv("SYNC_STORE_URL", "").strip()
    store_key = os.getenv("SYNC_STORE_KEY", "").strip()
    missing = [
        name
        for name, value in (("SYNC_STORE_URL", store_url), ("SYNC_STORE_KEY", store_key))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"{', '.join(missing)} is not set",
            details={"missing": missing},
        )

    try:
        return SyncConfig.model_validate(
            {
                "store_url": store_url,
                "store_key": store_key,
                "hotels_table_name": os.getenv("SYNC_HOTELS_TABLE", "hotels"),
                "services_table_name": os.getenv("SYNC_SERVICES_TABLE", "services"),
                "hotels_services_table_name": os.getenv("SYNC_HOTELS_SERVICES_TABLE", "hotels_services"),
                "max_workers": _env_int("SYNC_MAX_WORKERS", 4),
            }
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid sync configuration: {exc}") from exc
