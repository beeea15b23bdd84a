"""Hotel service synchronization: document changes to relational rows, and service filtering."""

from src.sync.dispatcher import ChangeDispatcher, ChangeKind, classify_change
from src.sync.errors import (
    BackendError,
    ConfigurationError,
    InvalidInput,
    PartialReconciliationError,
    SyncError,
)
from src.sync.name_registry import NameRegistry
from src.sync.service_filter import ServiceFilterResolver
from src.sync.synchronizer import AssociationSynchronizer, ReconcileResult, RemoveResult

__all__ = [
    "AssociationSynchronizer",
    "BackendError",
    "ChangeDispatcher",
    "ChangeKind",
    "ConfigurationError",
    "InvalidInput",
    "NameRegistry",
    "PartialReconciliationError",
    "ReconcileResult",
    "RemoveResult",
    "ServiceFilterResolver",
    "SyncError",
    "classify_change",
]
