# This file provides shared helpers for API endpoint tests.
# It exists so tests can override store and sync dependencies without touching real databases.
# The helpers build consistent config objects and scoped TestClient contexts.
# Centralized test wiring keeps API tests small and focused on behavior.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.api_config import ApiConfig
from src.api.app import app as default_app
from src.api.dependencies import (
    get_change_dispatcher,
    get_config,
    get_hotel_service,
    get_optional_database_client,
)
from src.sync.store import HotelTables


def build_test_config(*, expose_error_trace: bool = False) -> ApiConfig:
    """Create deterministic API config for tests."""

    return ApiConfig(
        api_name="Test Hotel Sync API",
        api_version_path="/api/v1",
        schema_version="1.0.0",
        host="0.0.0.0",
        port=8000,
        environment="test",
        enable_request_logging=False,
        expose_error_trace=expose_error_trace,
        allowed_origins=[],
        app_version="0.1.0",
    )


class FakeDBClient:
    """Simple fake store dependency for readiness endpoint tests."""

    def __init__(self, *, connected: bool = True, existing_tables: set[str] | None = None) -> None:
        self.tables = HotelTables()
        self._connected = connected
        self._tables = set(self.tables.names()) if existing_tables is None else existing_tables

    def can_connect(self) -> bool:
        return self._connected

    def table_exists(self, table_name: str) -> bool:
        return self._connected and table_name in self._tables


class FakeFilterStore:
    """Store stand-in returning canned filter rows and recording the bound names."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, *, error: Exception | None = None) -> None:
        self.tables = HotelTables()
        self.rows = rows or []
        self.error = error
        self.queries: list[dict[str, Any]] = []

    def fetch_all(self, query: str, params: dict[str, Any] | None = None, *, expanding=()) -> list[dict[str, Any]]:
        self.queries.append(dict(params or {}))
        if self.error is not None:
            raise self.error
        return list(self.rows)


class RecordingDispatcher:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any, Any]] = []

    def on_change(self, hotel_id: str, before_doc: Any, after_doc: Any) -> None:
        self.events.append((hotel_id, before_doc, after_doc))


@contextmanager
def api_test_client(
    *,
    app: FastAPI | None = None,
    config: ApiConfig | None = None,
    db_client: Any | None = None,
    hotel_service: Any | None = None,
    dispatcher: Any | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    target = app or default_app
    resolved_config = config or build_test_config()

    target.dependency_overrides[get_config] = lambda: resolved_config
    target.dependency_overrides[get_optional_database_client] = lambda: db_client
    if hotel_service is not None:
        target.dependency_overrides[get_hotel_service] = lambda: hotel_service
    if dispatcher is not None:
        target.dependency_overrides[get_change_dispatcher] = lambda: dispatcher

    try:
        with TestClient(target) as client:
            yield client
    finally:
        target.dependency_overrides.clear()
