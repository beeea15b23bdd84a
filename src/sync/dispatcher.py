# This module turns hotel document change notifications into sync actions.
# It exists so every trigger (HTTP webhook, CLI replay) shares one classification and error policy.
# A deleted document removes the hotel; any other change reconciles the hotel against the new document.
# Errors never leave `on_change`: they are logged and counted, and the event is dropped.

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager
from enum import Enum
from typing import Any

from src.sync.errors import ConfigurationError, InvalidInput, SyncError
from src.sync.locks import HOTEL_LOCKS, KeyedLock
from src.sync.metrics import SYNC_EVENTS_TOTAL
from src.sync.store import DatabaseClient, open_store
from src.sync.sync_config import SyncConfig, load_sync_config
from src.sync.synchronizer import AssociationSynchronizer

LOGGER = logging.getLogger("hotel_sync")

Document = Mapping[str, Any]


class ChangeKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def classify_change(before_doc: Document | None, after_doc: Document | None) -> ChangeKind:
    if after_doc is None:
        return ChangeKind.DELETE
    if before_doc is None:
        return ChangeKind.CREATE
    return ChangeKind.UPDATE


def extract_service_names(document: Document) -> list[str]:
    """Return the `services` list of a hotel document; a missing or null list means no services."""

    services = document.get("services")
    if services is None:
        return []
    if isinstance(services, (str, bytes)) or not isinstance(services, (list, tuple)):
        raise InvalidInput(f"Document field 'services' must be a list, got {type(services).__name__}")
    invalid = [item for item in services if not isinstance(item, str)]
    if invalid:
        raise InvalidInput(f"Document field 'services' must contain only strings, got {invalid!r}")
    return list(services)


class ChangeDispatcher:
    """Route document changes to the synchronizer with a store opened per invocation."""

    def __init__(
        self,
        *,
        config_loader: Callable[[], SyncConfig] = load_sync_config,
        store_opener: Callable[[SyncConfig], AbstractContextManager[DatabaseClient]] = open_store,
        locks: KeyedLock | None = None,
    ) -> None:
        self._config_loader = config_loader
        self._store_opener = store_opener
        self.locks = locks or HOTEL_LOCKS

    def on_change(self, hotel_id: str, before_doc: Document | None, after_doc: Document | None) -> None:
        kind = classify_change(before_doc, after_doc)
        outcome = "failed"
        try:
            outcome = self._dispatch(kind, hotel_id, after_doc)
        except ConfigurationError as exc:
            outcome = "dropped"
            LOGGER.error("%s; dropping %s event for hotel_id=%s", exc.message, kind.value, hotel_id)
        except InvalidInput as exc:
            outcome = "dropped"
            LOGGER.error("invalid %s event for hotel_id=%s: %s", kind.value, hotel_id, exc.message)
        except SyncError as exc:
            LOGGER.error("%s event failed for hotel_id=%s: %s", kind.value, hotel_id, exc.message)
        except Exception:
            LOGGER.exception("%s event crashed for hotel_id=%s", kind.value, hotel_id)
        finally:
            SYNC_EVENTS_TOTAL.labels(change=kind.value, outcome=outcome).inc()

    def _dispatch(self, kind: ChangeKind, hotel_id: str, after_doc: Document | None) -> str:
        config = self._config_loader()
        service_names = extract_service_names(after_doc) if after_doc is not None else []

        with self._store_opener(config) as db:
            synchronizer = AssociationSynchronizer(db=db, max_workers=config.max_workers, locks=self.locks)
            if kind is ChangeKind.DELETE:
                result = synchronizer.remove(hotel_id)
            else:
                result = synchronizer.reconcile(hotel_id, service_names)

        return "ok" if result.ok else "partial"
