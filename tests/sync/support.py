# This file provides shared helpers for sync-layer tests.
# It exists so tests can inspect projection tables and inject store failures without a live Postgres.
# The fakes implement only the calls the sync classes make.

from __future__ import annotations

import threading
from typing import Any

from src.sync.errors import BackendError
from src.sync.name_registry import NameRegistry
from src.sync.store import DatabaseClient, HotelTables


def hotel_ids(db: DatabaseClient) -> list[str]:
    rows = db.fetch_all("SELECT hotel_id FROM hotels ORDER BY hotel_id")
    return [row["hotel_id"] for row in rows]


def linked_services(db: DatabaseClient, hotel_id: str) -> list[str]:
    rows = db.fetch_all(
        """
        SELECT s.name
        FROM hotels_services hs
        JOIN services s ON s.id = hs.service_id
        WHERE hs.hotel_id = :hotel_id
        ORDER BY s.name
        """,
        {"hotel_id": hotel_id},
    )
    return [row["name"] for row in rows]


def link_count(db: DatabaseClient, hotel_id: str) -> int:
    row = db.fetch_one(
        "SELECT COUNT(*) AS n FROM hotels_services WHERE hotel_id = :hotel_id",
        {"hotel_id": hotel_id},
    )
    return int(row["n"]) if row else 0


def service_rows(db: DatabaseClient, name: str) -> int:
    row = db.fetch_one("SELECT COUNT(*) AS n FROM services WHERE name = :name", {"name": name})
    return int(row["n"]) if row else 0


class FailingRegistry(NameRegistry):
    """Registry that fails for selected names and resolves the rest normally."""

    def __init__(self, *, db: DatabaseClient, failing: set[str]) -> None:
        super().__init__(db=db)
        self.failing = failing

    def resolve(self, name: str) -> int:
        if name in self.failing:
            raise BackendError(f"lookup failed for {name}")
        return super().resolve(name)


class StaticRegistry:
    """Registry stub mapping names to fixed ids; unknown names fail."""

    def __init__(self, ids: dict[str, int]) -> None:
        self.ids = ids
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def resolve(self, name: str) -> int:
        with self._lock:
            self.calls.append(name)
        if name not in self.ids:
            raise BackendError(f"no id for {name}")
        return self.ids[name]


class RecordingStore:
    """In-memory stand-in for DatabaseClient that records write statements."""

    def __init__(self, *, fail_on: str | None = None) -> None:
        self.tables = HotelTables()
        self.statements: list[tuple[str, dict[str, Any]]] = []
        self.fail_on = fail_on
        self._lock = threading.Lock()

    def execute(self, query: str, params: dict[str, Any] | None = None) -> int:
        normalized = " ".join(query.split())
        if self.fail_on is not None and self.fail_on in normalized:
            raise BackendError(f"store rejected: {self.fail_on}")
        with self._lock:
            self.statements.append((normalized, dict(params or {})))
        return 1

    def statements_starting_with(self, prefix: str) -> list[dict[str, Any]]:
        return [params for statement, params in self.statements if statement.startswith(prefix)]
