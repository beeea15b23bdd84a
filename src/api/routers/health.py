# This file defines liveness, readiness, and version endpoints for API operations.
# It exists so orchestration and monitoring systems can verify service health quickly.
# The readiness check confirms store configuration, connectivity, and that all projection tables exist.
# Version details here help clients track API and schema compatibility over time.

from __future__ import annotations

import subprocess
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.api.api_config import ApiConfig
from src.api.dependencies import get_config, get_optional_database_client
from src.api.schema_versions import build_version_fields
from src.api.schemas.health_schemas import HealthResponse, ReadinessResponse, VersionResponse
from src.sync.errors import BackendError
from src.sync.store import DatabaseClient

router = APIRouter(tags=["health"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
OptionalDBDep = Annotated[DatabaseClient | None, Depends(get_optional_database_client)]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _git_commit() -> str | None:
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
        value = completed.stdout.strip()
        return value or None
    except Exception:
        return None


def _base_fields(request: Request, config: ApiConfig) -> dict[str, object]:
    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "timestamp": _utc_now(),
    }


def _missing_tables(db: DatabaseClient) -> list[str]:
    missing: list[str] = []
    for table_name in db.tables.names():
        try:
            exists = db.table_exists(table_name)
        except BackendError:
            exists = False
        if not exists:
            missing.append(table_name)
    return missing


@router.get("/health", response_model=HealthResponse)
def health(
    request: Request,
    config: ConfigDep,
) -> dict[str, object]:
    return {
        **_base_fields(request, config),
        "status": "ok",
        "environment": config.environment,
        "service_name": config.api_name,
    }


@router.get("/ready", response_model=ReadinessResponse)
def ready(
    request: Request,
    config: ConfigDep,
    db: OptionalDBDep,
) -> dict[str, object]:
    store_configured = db is not None
    db_connected = db is not None and db.can_connect()
    missing_tables = _missing_tables(db) if db is not None and db_connected else []
    is_ready = db_connected and not missing_tables

    return {
        **_base_fields(request, config),
        "store_configured": store_configured,
        "db_connected": db_connected,
        "missing_tables": missing_tables,
        "ready": is_ready,
        "database": "reachable" if db_connected else "unreachable",
    }


@router.get("/version", response_model=VersionResponse)
def version(
    request: Request,
    config: ConfigDep,
) -> dict[str, object]:
    return {
        **_base_fields(request, config),
        "api_version_path": config.api_version_path,
        "app_version": config.app_version,
        "git_commit": _git_commit(),
        "project": config.api_name,
        "version": config.app_version,
    }
