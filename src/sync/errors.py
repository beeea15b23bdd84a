# This file defines the error taxonomy shared by the sync layer and the API.
# It exists so request paths can map failures to status codes and event paths can log them uniformly.
# Each error carries an HTTP status and a stable error code used in API error bodies.
# Store failures keep a diagnostic trace so operators can inspect them without raw tracebacks.

from __future__ import annotations

import traceback
from typing import Any


class SyncError(Exception):
    """Base error for hotel service synchronization and filtering."""

    status_code = 500
    error_code = "SYNC_ERROR"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigurationError(SyncError):
    """Store endpoint or credential is missing or unusable."""

    status_code = 422
    error_code = "CONFIGURATION_ERROR"


class InvalidInput(SyncError):
    """Caller supplied input the core cannot act on."""

    status_code = 422
    error_code = "INVALID_INPUT"


class BackendError(SyncError):
    """The relational store rejected or failed a call."""

    status_code = 500
    error_code = "BACKEND_ERROR"

    def __init__(self, message: str, *, trace: str | None = None, details: Any | None = None) -> None:
        self.trace = trace
        super().__init__(message, details=details)

    @classmethod
    def from_exception(cls, message: str, exc: BaseException) -> BackendError:
        trace = "".join(traceback.format_exception_only(type(exc), exc)).strip()
        return cls(f"{message}: {exc.__class__.__name__}", trace=trace)


class PartialReconciliationError(SyncError):
    """Some per-service links failed while others succeeded."""

    error_code = "PARTIAL_RECONCILIATION"

    def __init__(self, hotel_id: str, failures: dict[str, str]) -> None:
        self.hotel_id = hotel_id
        self.failures = dict(failures)
        names = ", ".join(sorted(self.failures))
        super().__init__(
            f"Hotel {hotel_id!r} reconciled partially; failed services: {names}",
            details={"hotel_id": hotel_id, "failures": self.failures},
        )
