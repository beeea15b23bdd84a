"""
Database connection utilities.
Builds SQLAlchemy engines for the relational projection from an endpoint URL and an access key.
"""

from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url


def build_store_url(store_url: str, store_key: str | None) -> URL:
    """Return the store URL with the access key injected as its password.

    SQLite URLs carry no credentials, so the key is not applied to them. A URL
    that already embeds a password keeps it.
    """

    url = make_url(store_url)
    if url.get_backend_name() == "sqlite":
        return url
    if store_key and url.password is None:
        url = url.set(password=store_key)
    return url


def create_store_engine(store_url: str, store_key: str | None = None) -> Engine:
    url = build_store_url(store_url, store_key)
    if url.get_backend_name() == "sqlite":
        return create_engine(url, future=True, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True, future=True)


def test_connection(engine: Engine) -> bool:
    """Return True if the database can be reached and queried."""

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
