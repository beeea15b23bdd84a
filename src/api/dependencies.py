# This file provides dependency factories for FastAPI routes and middleware.
# It exists so services are created once and shared through dependency injection.
# The store client is cached for the process once configuration is present;
# missing store configuration raises ConfigurationError on every request until it is fixed.

from __future__ import annotations

from functools import lru_cache

from src.api.api_config import ApiConfig, get_api_config
from src.api.services.hotel_service import HotelService
from src.sync.dispatcher import ChangeDispatcher
from src.sync.errors import ConfigurationError
from src.sync.service_filter import ServiceFilterResolver
from src.sync.store import DatabaseClient
from src.sync.sync_config import SyncConfig, load_sync_config


@lru_cache(maxsize=1)
def get_sync_config() -> SyncConfig:
    return load_sync_config()


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    return DatabaseClient.from_config(get_sync_config())


def get_optional_database_client() -> DatabaseClient | None:
    try:
        return get_database_client()
    except ConfigurationError:
        return None


def get_hotel_service() -> HotelService:
    config = get_api_config()
    resolver = ServiceFilterResolver(db=get_database_client())
    return HotelService(config=config, resolver=resolver)


@lru_cache(maxsize=1)
def get_change_dispatcher() -> ChangeDispatcher:
    return ChangeDispatcher()


def get_config() -> ApiConfig:
    return get_api_config()
