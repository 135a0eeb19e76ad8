"""Product storage abstractions and backends."""

from .errors import NoFieldsToUpdate, ProductNotFound, StorageError, StorageUnavailable
from .key_value import (
    DbmKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueProductStorage,
    KeyValueStore,
    RedisKeyValueStore,
)
from .product_storage import ProductStorage, StorageBackend
from .relational import RelationalProductStorage
from .selector import build_product_storage, select_backend

__all__ = [
    "DbmKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueProductStorage",
    "KeyValueStore",
    "NoFieldsToUpdate",
    "ProductNotFound",
    "ProductStorage",
    "RedisKeyValueStore",
    "RelationalProductStorage",
    "StorageBackend",
    "StorageError",
    "StorageUnavailable",
    "build_product_storage",
    "select_backend",
]
