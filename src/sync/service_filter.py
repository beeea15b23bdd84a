# This module answers "which hotels offer all of these services" against the relational projection.
# It exists so the API and CLI share one query and one AND-semantics post-filter.
# The store narrows candidates to hotels with at least one requested service and returns their full service lists.
# Hotels whose service set does not cover every requested name are dropped before ids are deduplicated.

from __future__ import annotations

import logging
from collections.abc import Iterable

from src.sync.errors import InvalidInput
from src.sync.store import DatabaseClient

LOGGER = logging.getLogger("hotel_sync")


def normalize_service_names(raw_names: Iterable[str]) -> list[str]:
    """Drop blank names and collapse duplicates keeping first occurrence.

    Names are otherwise kept as given: stored service names are matched exactly,
    surrounding whitespace included.
    """

    seen: dict[str, None] = {}
    for raw in raw_names:
        name = str(raw)
        if name.strip():
            seen.setdefault(name, None)
    return list(seen)


class ServiceFilterResolver:
    """Resolve a set of required service names into matching hotel ids."""

    def __init__(self, *, db: DatabaseClient) -> None:
        self.db = db
        self.tables = db.tables

    def filter_hotels(self, required_services: Iterable[str]) -> list[str]:
        required = normalize_service_names(required_services)
        if not required:
            raise InvalidInput("No services provided")

        rows = self.db.fetch_all(self._candidate_query(), {"names": required}, expanding=("names",))

        services_by_hotel: dict[str, set[str]] = {}
        for row in rows:
            services_by_hotel.setdefault(str(row["hotel_id"]), set()).add(str(row["service_name"]))

        required_set = set(required)
        matches = [hotel_id for hotel_id, names in services_by_hotel.items() if required_set <= names]
        LOGGER.info(
            "filtered hotels services=%s candidates=%d matches=%d",
            required,
            len(services_by_hotel),
            len(matches),
        )
        return matches

    def _candidate_query(self) -> str:
        hotels = self.tables.hotels
        links = self.tables.hotels_services
        services = self.tables.services
        return f"""
        SELECT
            h.hotel_id,
            s.name AS service_name
        FROM {hotels} h
        JOIN {links} hs ON hs.hotel_id = h.hotel_id
        JOIN {services} s ON s.id = hs.service_id
        WHERE h.hotel_id IN (
            SELECT m.hotel_id
            FROM {links} m
            JOIN {services} ms ON ms.id = m.service_id
            WHERE ms.name IN :names
        )
        ORDER BY h.hotel_id ASC, s.name ASC
        """
