# This module maps service names to stable service identifiers.
# It is the only writer of the services table; rows are created on first reference and never deleted.
# Creation uses an insert that yields to the UNIQUE(name) constraint, then re-reads the winner's row,
# so two callers racing on the same new name end up with one row and one identifier.

from __future__ import annotations

import logging
import threading

from src.sync.errors import BackendError, InvalidInput
from src.sync.store import DatabaseClient

LOGGER = logging.getLogger("hotel_sync")


class NameRegistry:
    """Resolve service names to identifiers, creating them lazily."""

    def __init__(self, *, db: DatabaseClient, cache: bool = True) -> None:
        self.db = db
        self.services_table = db.tables.services
        self._cache: dict[str, int] | None = {} if cache else None
        self._lock = threading.Lock()

    def resolve(self, name: str) -> int:
        """Return the identifier for `name`, inserting a new service row if needed.

        Matching is case-sensitive and exact. Store failures propagate as
        BackendError and are not retried here.
        """

        if not isinstance(name, str) or not name.strip():
            raise InvalidInput(f"Service name must be a non-empty string, got {name!r}")

        cached = self._cached(name)
        if cached is not None:
            return cached

        service_id = self._lookup(name)
        if service_id is None:
            self.db.execute(
                f"""
                INSERT INTO {self.services_table} (name)
                VALUES (:name)
                ON CONFLICT (name) DO NOTHING
                """,
                {"name": name},
            )
            service_id = self._lookup(name)
            if service_id is None:
                raise BackendError(f"Service {name!r} was not readable after insert")
            LOGGER.info("created service name=%s id=%s", name, service_id)

        self._remember(name, service_id)
        return service_id

    def _lookup(self, name: str) -> int | None:
        row = self.db.fetch_one(
            f"SELECT id FROM {self.services_table} WHERE name = :name LIMIT 1",
            {"name": name},
        )
        return int(row["id"]) if row is not None else None

    def _cached(self, name: str) -> int | None:
        if self._cache is None:
            return None
        with self._lock:
            return self._cache.get(name)

    def _remember(self, name: str, service_id: int) -> None:
        if self._cache is None:
            return
        with self._lock:
            self._cache[name] = service_id
