"""Backend selection for product storage.

The backend is decided once, when the composition root builds its storage
instance; the instance is then passed to whatever needs it.
"""

from __future__ import annotations

import importlib.util

from loguru import logger

from src.stockroom.core.storage.key_value import (
    DbmKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueProductStorage,
    KeyValueStore,
    RedisKeyValueStore,
)
from src.stockroom.core.storage.product_storage import ProductStorage, StorageBackend
from src.stockroom.core.storage.relational import RelationalProductStorage
from src.stockroom.runtime.config.config_data import ConfigData, KeyValueStorageConfig
from src.stockroom.runtime.context import get_config


def sqlite_available() -> bool:
    """Check whether the embedded SQLite driver can be imported.

    Some builds (e.g. browser runtimes) ship Python without ``sqlite3``.
    """
    return importlib.util.find_spec("sqlite3") is not None


def select_backend(config: ConfigData | None = None) -> StorageBackend:
    """Decide which backend the configuration and runtime call for."""
    config = config or get_config()
    choice = config.storage.backend

    if choice != "auto":
        backend = StorageBackend(choice)
        logger.info("Product storage backend {} (configured)", backend.value)
        return backend

    if sqlite_available():
        logger.info("Product storage backend relational (sqlite3 available)")
        return StorageBackend.RELATIONAL

    logger.info("Product storage backend key_value (sqlite3 unavailable)")
    return StorageBackend.KEY_VALUE


def _build_key_value_store(cfg: KeyValueStorageConfig) -> KeyValueStore:
    if cfg.driver == "memory":
        return InMemoryKeyValueStore()

    if cfg.driver == "redis":
        if not cfg.url:
            raise ValueError("storage.key_value.url is required for the redis driver")

        import redis.asyncio as redis

        redis_client = redis.from_url(
            cfg.url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        return RedisKeyValueStore(redis_client)

    return DbmKeyValueStore(cfg.path)


def build_product_storage(config: ConfigData | None = None) -> ProductStorage:
    """Construct the product storage the current runtime should use.

    The returned instance is not initialized yet; call ``init()`` before use.

    Args:
        config: Configuration to use; defaults to the active application config
    """
    config = config or get_config()
    backend = select_backend(config)

    if backend is StorageBackend.RELATIONAL:
        relational = config.storage.relational
        return RelationalProductStorage(
            relational.url, echo=relational.echo, timeout=relational.timeout
        )

    key_value = config.storage.key_value
    return KeyValueProductStorage(
        _build_key_value_store(key_value), storage_key=key_value.storage_key
    )
