# This module replays recorded hotel document changes through the change dispatcher.
# It exists so operators can backfill or repair the relational projection from an export of change events.
# Each input line is a JSON object `{"hotel_id": ..., "before": {...} | null, "after": {...} | null}`.
# Malformed lines are counted and skipped; the dispatcher's own error policy applies to each event.

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from src.sync.dispatcher import ChangeDispatcher, classify_change

LOGGER = logging.getLogger("hotel_sync")


def parse_change_line(line: str) -> dict[str, Any] | None:
    stripped = line.strip()
    if not stripped:
        return None
    payload = json.loads(stripped)
    if not isinstance(payload, dict):
        raise ValueError("change line must be a JSON object")
    hotel_id = payload.get("hotel_id")
    if not isinstance(hotel_id, str) or not hotel_id:
        raise ValueError("change line requires a non-empty string 'hotel_id'")
    for key in ("before", "after"):
        if payload.get(key) is not None and not isinstance(payload[key], dict):
            raise ValueError(f"change line field {key!r} must be an object or null")
    return {"hotel_id": hotel_id, "before": payload.get("before"), "after": payload.get("after")}


def replay_changes(lines: Iterable[str], dispatcher: ChangeDispatcher) -> dict[str, int]:
    """Dispatch every change event in `lines` in order and return per-kind counts."""

    counts = {"create": 0, "update": 0, "delete": 0, "skipped": 0}
    for line_number, line in enumerate(lines, start=1):
        try:
            event = parse_change_line(line)
        except ValueError as exc:
            counts["skipped"] += 1
            LOGGER.warning("skipping change line %d: %s", line_number, exc)
            continue
        if event is None:
            continue

        kind = classify_change(event["before"], event["after"])
        dispatcher.on_change(event["hotel_id"], event["before"], event["after"])
        counts[kind.value] += 1
    return counts
