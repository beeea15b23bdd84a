"""DDL helpers for the hotel projection tables."""

from __future__ import annotations

from sqlalchemy.engine import Engine

from src.sync.store import HotelTables

_ID_COLUMN = {
    "postgresql": "BIGSERIAL PRIMARY KEY",
    "sqlite": "INTEGER PRIMARY KEY AUTOINCREMENT",
}
_TIMESTAMP_TYPE = {
    "postgresql": "TIMESTAMPTZ",
    "sqlite": "TEXT",
}


def hotel_sync_ddl(dialect_name: str, tables: HotelTables | None = None) -> list[str]:
    """Return CREATE statements for the hotel projection in dependency order."""

    tables = tables or HotelTables()
    id_column = _ID_COLUMN.get(dialect_name, "BIGSERIAL PRIMARY KEY")
    ts_type = _TIMESTAMP_TYPE.get(dialect_name, "TIMESTAMP")
    return [
        f"""
        CREATE TABLE IF NOT EXISTS {tables.hotels} (
            hotel_id TEXT PRIMARY KEY,
            updated_at {ts_type} NOT NULL
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {tables.services} (
            id {id_column},
            name TEXT NOT NULL UNIQUE
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {tables.hotels_services} (
            hotel_id TEXT NOT NULL REFERENCES {tables.hotels} (hotel_id) ON DELETE CASCADE,
            service_id BIGINT NOT NULL REFERENCES {tables.services} (id),
            updated_at {ts_type} NOT NULL,
            PRIMARY KEY (hotel_id, service_id)
        )
        """,
        f"""
        CREATE INDEX IF NOT EXISTS ix_{tables.hotels_services}_service_id
            ON {tables.hotels_services} (service_id)
        """,
    ]


def apply_hotel_sync_ddl(engine: Engine, tables: HotelTables | None = None) -> None:
    """Create the hotel projection tables if they do not exist yet."""

    with engine.begin() as connection:
        for statement in hotel_sync_ddl(engine.dialect.name, tables):
            connection.exec_driver_sql(statement)
