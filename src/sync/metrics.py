# This file declares Prometheus metrics for the sync layer.
# They are exported through the API `/metrics` endpoint alongside HTTP metrics.

from __future__ import annotations

from prometheus_client import Counter, Histogram

SYNC_EVENTS_TOTAL = Counter(
    "hotel_sync_events_total",
    "Hotel document change events processed, by change kind and outcome.",
    ["change", "outcome"],
)
SYNC_SERVICE_LINKS_TOTAL = Counter(
    "hotel_sync_service_links_total",
    "Per-service association upserts attempted during reconciliation.",
    ["outcome"],
)
SYNC_RECONCILE_DURATION_SECONDS = Histogram(
    "hotel_sync_reconcile_duration_seconds",
    "Duration of a single hotel reconciliation in seconds.",
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
