# This file implements the hotel lookup service used by the filter endpoints.
# It exists so routers can answer filter requests without touching SQL or store wiring.
# The service delegates AND-semantics matching to the sync layer's filter resolver.
# Results are shaped as `{hotel_id}` rows ready for the response model.

from __future__ import annotations

from collections.abc import Iterable

from src.api.api_config import ApiConfig
from src.sync.service_filter import ServiceFilterResolver


class HotelService:
    """Data retrieval for hotel filter endpoints."""

    def __init__(self, *, config: ApiConfig, resolver: ServiceFilterResolver) -> None:
        self.config = config
        self.resolver = resolver

    def find_hotels_with_services(self, services: Iterable[str]) -> list[dict[str, str]]:
        hotel_ids = self.resolver.filter_hotels(services)
        return [{"hotel_id": hotel_id} for hotel_id in hotel_ids]
