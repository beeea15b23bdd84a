# This file wraps relational store access for the hotel projection.
# It exists to keep SQL execution details out of sync and API code and make testing easier.
# Every SQLAlchemy failure is converted into BackendError at this boundary.
# `open_store` scopes one client to one invocation and always releases its connections.

from __future__ import annotations

import re
from collections.abc import Collection, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import bindparam, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from src.common.db import create_store_engine
from src.sync.errors import BackendError, ConfigurationError
from src.sync.sync_config import SyncConfig

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@dataclass(frozen=True)
class HotelTables:
    hotels: str = "hotels"
    services: str = "services"
    hotels_services: str = "hotels_services"

    @classmethod
    def from_config(cls, config: SyncConfig) -> HotelTables:
        return cls(
            hotels=config.hotels_table_name,
            services=config.services_table_name,
            hotels_services=config.hotels_services_table_name,
        )

    def names(self) -> tuple[str, str, str]:
        return (self.hotels, self.services, self.hotels_services)


class DatabaseClient:
    """Minimal SQLAlchemy wrapper for hotel projection reads and writes."""

    def __init__(self, *, engine: Engine, tables: HotelTables | None = None) -> None:
        self._engine = engine
        self.tables = tables or HotelTables()
        for table_name in self.tables.names():
            self._validate_identifier(table_name)

    @classmethod
    def from_config(cls, config: SyncConfig) -> DatabaseClient:
        try:
            engine = create_store_engine(config.store_url, config.store_key)
        except (SQLAlchemyError, ValueError) as exc:
            raise ConfigurationError(f"Store URL is not usable: {exc}") from exc
        return cls(engine=engine, tables=HotelTables.from_config(config))

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, table_name: str) -> bool:
        self._validate_identifier(table_name)
        try:
            return bool(inspect(self._engine).has_table(table_name))
        except SQLAlchemyError as exc:
            raise BackendError.from_exception(f"Table lookup failed for {table_name}", exc) from exc

    def fetch_all(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        expanding: Collection[str] = (),
    ) -> list[dict[str, Any]]:
        try:
            with self._engine.connect() as connection:
                rows = connection.execute(self._statement(query, expanding), dict(params or {})).mappings().all()
        except SQLAlchemyError as exc:
            raise BackendError.from_exception("Store query failed", exc) from exc
        return [dict(row) for row in rows]

    def fetch_one(self, query: str, params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        try:
            with self._engine.connect() as connection:
                row = connection.execute(text(query), dict(params or {})).mappings().first()
        except SQLAlchemyError as exc:
            raise BackendError.from_exception("Store query failed", exc) from exc
        return dict(row) if row is not None else None

    def execute(self, query: str, params: Mapping[str, Any] | None = None) -> int:
        """Run one write statement in its own transaction and return the affected row count."""

        try:
            with self._engine.begin() as connection:
                result = connection.execute(text(query), dict(params or {}))
                return int(result.rowcount or 0)
        except SQLAlchemyError as exc:
            raise BackendError.from_exception("Store write failed", exc) from exc

    def dispose(self) -> None:
        self._engine.dispose()

    @staticmethod
    def _statement(query: str, expanding: Collection[str]) -> TextClause:
        statement = text(query)
        if expanding:
            statement = statement.bindparams(*(bindparam(name, expanding=True) for name in expanding))
        return statement

    def _validate_identifier(self, identifier: str) -> str:
        if not _IDENTIFIER_RE.match(identifier):
            raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
        return identifier


@contextmanager
def open_store(config: SyncConfig) -> Iterator[DatabaseClient]:
    """Yield a store client bound to this invocation and dispose it on every exit path."""

    client = DatabaseClient.from_config(config)
    try:
        yield client
    finally:
        client.dispose()
