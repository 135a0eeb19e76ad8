"""Storage fixtures for testing."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from src.stockroom.core.storage import (
    InMemoryKeyValueStore,
    KeyValueProductStorage,
    ProductStorage,
    RelationalProductStorage,
)

__all__ = [
    "database_url",
    "key_value_storage",
    "kv_store",
    "product_storage",
    "relational_storage",
]


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite URL of a fresh database file."""
    return f"sqlite:///{tmp_path / 'products.db'}"


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    """Empty in-memory key/value primitive."""
    return InMemoryKeyValueStore()


@pytest.fixture
async def relational_storage(database_url: str) -> AsyncGenerator[RelationalProductStorage, None]:
    """Initialized relational storage on a temporary database file."""
    storage = RelationalProductStorage(database_url)
    await storage.init()
    yield storage
    await storage.close()


@pytest.fixture
async def key_value_storage(
    kv_store: InMemoryKeyValueStore,
) -> AsyncGenerator[KeyValueProductStorage, None]:
    """Initialized key/value storage on an in-memory primitive."""
    storage = KeyValueProductStorage(kv_store)
    await storage.init()
    yield storage
    await storage.close()


@pytest.fixture(params=["relational", "key_value"])
async def product_storage(
    request: pytest.FixtureRequest,
    database_url: str,
    kv_store: InMemoryKeyValueStore,
) -> AsyncGenerator[ProductStorage, None]:
    """Each backend in turn, initialized and empty."""
    if request.param == "relational":
        storage: ProductStorage = RelationalProductStorage(database_url)
    else:
        storage = KeyValueProductStorage(kv_store)
    await storage.init()
    yield storage
    await storage.close()
