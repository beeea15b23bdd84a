"""
Shared test configuration.
It provides environment defaults and a temporary SQLite-backed hotel projection for sync tests.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

ENV_DEFAULTS = {
    "PROJECT_NAME": "test-project",
    "ENV": "test",
    "LOG_LEVEL": "INFO",
}

# The API app is built at import time, so the defaults must exist before collection.
for _key, _value in ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)

from src.sync.ddl import apply_hotel_sync_ddl  # noqa: E402
from src.sync.store import DatabaseClient  # noqa: E402
from src.sync.sync_config import SyncConfig  # noqa: E402


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    for key, value in ENV_DEFAULTS.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)


@pytest.fixture
def sync_config(tmp_path: Path) -> SyncConfig:
    return SyncConfig(
        store_url=f"sqlite:///{tmp_path / 'hotels.db'}",
        store_key="test-key",
        max_workers=1,
    )


@pytest.fixture
def store(sync_config: SyncConfig) -> Iterator[DatabaseClient]:
    """SQLite-backed store with the hotel projection schema applied."""

    client = DatabaseClient.from_config(sync_config)
    apply_hotel_sync_ddl(client.engine, client.tables)
    try:
        yield client
    finally:
        client.dispose()
