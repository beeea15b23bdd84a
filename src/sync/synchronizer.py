# This module reconciles the relational hotel rows with the current hotel document.
# Reconciliation is a full replace: upsert the hotel, drop every association, then link each listed service.
# Per-service links run on a bounded worker pool and are all awaited; their failures are collected, not rolled back.
# Writes for one hotel are serialized through a keyed lock so overlapping events cannot interleave.

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.sync.errors import PartialReconciliationError, SyncError
from src.sync.locks import HOTEL_LOCKS, KeyedLock
from src.sync.metrics import SYNC_RECONCILE_DURATION_SECONDS, SYNC_SERVICE_LINKS_TOTAL
from src.sync.name_registry import NameRegistry
from src.sync.store import DatabaseClient

LOGGER = logging.getLogger("hotel_sync")


def utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


@dataclass(frozen=True)
class ReconcileResult:
    hotel_id: str
    requested: int
    linked: dict[str, int] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    aborted: str | None = None

    @property
    def ok(self) -> bool:
        return self.aborted is None and not self.failures

    @property
    def error(self) -> PartialReconciliationError | None:
        if not self.failures:
            return None
        return PartialReconciliationError(self.hotel_id, self.failures)


@dataclass(frozen=True)
class RemoveResult:
    hotel_id: str
    hotel_deleted: bool
    links_deleted: int
    failures: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class AssociationSynchronizer:
    """Owns the write path for hotel rows and hotel-service associations."""

    def __init__(
        self,
        *,
        db: DatabaseClient,
        registry: NameRegistry | None = None,
        max_workers: int = 4,
        locks: KeyedLock | None = None,
    ) -> None:
        self.db = db
        self.registry = registry or NameRegistry(db=db)
        self.max_workers = max(1, max_workers)
        self.locks = locks or HOTEL_LOCKS
        self.hotels_table = db.tables.hotels
        self.links_table = db.tables.hotels_services

    def reconcile(self, hotel_id: str, service_names: Sequence[str]) -> ReconcileResult:
        """Make the associations of `hotel_id` equal the given service names.

        Duplicate names are not collapsed; each produces its own upsert attempt.
        Failures are logged and reported in the result, never raised.
        """

        names = list(service_names)
        started = time.perf_counter()
        with self.locks.hold(hotel_id):
            now = utc_now_iso()
            try:
                self._upsert_hotel(hotel_id, now)
                self._delete_links(hotel_id)
            except SyncError as exc:
                LOGGER.error("reconcile aborted hotel_id=%s error=%s", hotel_id, exc.message)
                return ReconcileResult(hotel_id=hotel_id, requested=len(names), aborted=exc.message)

            linked, failures = self._link_services(hotel_id, names, now)

        SYNC_RECONCILE_DURATION_SECONDS.observe(time.perf_counter() - started)
        result = ReconcileResult(hotel_id=hotel_id, requested=len(names), linked=linked, failures=failures)
        if result.error is not None:
            LOGGER.error("%s", result.error.message)
        else:
            LOGGER.info("reconciled hotel_id=%s services=%d", hotel_id, len(linked))
        return result

    def remove(self, hotel_id: str) -> RemoveResult:
        """Delete the hotel row and then its associations; both deletes are always attempted."""

        failures: list[str] = []
        hotel_deleted = False
        links_deleted = 0
        with self.locks.hold(hotel_id):
            try:
                hotel_deleted = (
                    self.db.execute(
                        f"DELETE FROM {self.hotels_table} WHERE hotel_id = :hotel_id",
                        {"hotel_id": hotel_id},
                    )
                    > 0
                )
            except SyncError as exc:
                LOGGER.error("hotel delete failed hotel_id=%s error=%s", hotel_id, exc.message)
                failures.append(exc.message)

            try:
                links_deleted = self._delete_links(hotel_id)
            except SyncError as exc:
                LOGGER.error("association delete failed hotel_id=%s error=%s", hotel_id, exc.message)
                failures.append(exc.message)

        LOGGER.info(
            "removed hotel_id=%s hotel_deleted=%s links_deleted=%d",
            hotel_id,
            hotel_deleted,
            links_deleted,
        )
        return RemoveResult(
            hotel_id=hotel_id,
            hotel_deleted=hotel_deleted,
            links_deleted=links_deleted,
            failures=failures,
        )

    def _upsert_hotel(self, hotel_id: str, now: str) -> None:
        self.db.execute(
            f"""
            INSERT INTO {self.hotels_table} (hotel_id, updated_at)
            VALUES (:hotel_id, :updated_at)
            ON CONFLICT (hotel_id) DO UPDATE SET updated_at = EXCLUDED.updated_at
            """,
            {"hotel_id": hotel_id, "updated_at": now},
        )

    def _delete_links(self, hotel_id: str) -> int:
        return self.db.execute(
            f"DELETE FROM {self.links_table} WHERE hotel_id = :hotel_id",
            {"hotel_id": hotel_id},
        )

    def _link_service(self, hotel_id: str, name: str, now: str) -> int:
        service_id = self.registry.resolve(name)
        self.db.execute(
            f"""
            INSERT INTO {self.links_table} (hotel_id, service_id, updated_at)
            VALUES (:hotel_id, :service_id, :updated_at)
            ON CONFLICT (hotel_id, service_id) DO UPDATE SET updated_at = EXCLUDED.updated_at
            """,
            {"hotel_id": hotel_id, "service_id": service_id, "updated_at": now},
        )
        return service_id

    def _link_services(
        self, hotel_id: str, names: list[str], now: str
    ) -> tuple[dict[str, int], dict[str, str]]:
        linked: dict[str, int] = {}
        failures: dict[str, str] = {}

        def record(name: str, service_id: int | None, exc: Exception | None) -> None:
            if exc is None and service_id is not None:
                linked[name] = service_id
                SYNC_SERVICE_LINKS_TOTAL.labels(outcome="linked").inc()
                return
            message = exc.message if isinstance(exc, SyncError) else f"{exc.__class__.__name__}: {exc}"
            failures[str(name)] = message
            SYNC_SERVICE_LINKS_TOTAL.labels(outcome="failed").inc()
            LOGGER.warning("service link failed hotel_id=%s service=%r error=%s", hotel_id, name, message)

        if self.max_workers == 1 or len(names) <= 1:
            for name in names:
                try:
                    record(name, self._link_service(hotel_id, name, now), None)
                except Exception as exc:
                    record(name, None, exc)
            return linked, failures

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(names))) as executor:
            future_to_name = {executor.submit(self._link_service, hotel_id, name, now): name for name in names}
            for future in as_completed(future_to_name):
                name = future_to_name[future]
                try:
                    record(name, future.result(), None)
                except Exception as exc:
                    record(name, None, exc)
        return linked, failures
