"""Key/value product storage.

For runtimes that only offer a flat persistent key/value surface. The whole
product collection lives under a single key as one JSON array, so every
mutation is a read-modify-write of that array.
"""

from __future__ import annotations

import asyncio
import dbm
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from operator import attrgetter
from pathlib import Path

from loguru import logger
from pydantic import TypeAdapter
from redis.exceptions import RedisError

from src.stockroom.core.storage.errors import ProductNotFound, StorageUnavailable
from src.stockroom.core.storage.product_storage import ProductStorage, StorageBackend
from src.stockroom.entities.product import Product, ProductCreate, ProductUpdate

DEFAULT_STORAGE_KEY = "estoque_products"

_PRODUCT_LIST = TypeAdapter(list[Product])


class KeyValueStore(ABC):
    """Minimal persistent string key/value primitive."""

    @abstractmethod
    async def open(self) -> None:
        """Open the medium.

        Raises:
            StorageUnavailable: If the medium cannot be opened
        """

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def close(self) -> None:
        """Release the medium. Safe to call when already closed."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; contents survive close/open but not the process."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def open(self) -> None:
        pass

    async def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def close(self) -> None:
        pass


class DbmKeyValueStore(KeyValueStore):
    """Store backed by a local ``dbm`` file.

    Every call runs on one dedicated worker thread: some dbm flavours
    (``dbm.sqlite3``) only accept calls from the thread that opened the file.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._db = None
        self._executor: ThreadPoolExecutor | None = None

    async def open(self) -> None:
        if self._db is not None:
            return
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dbm")
        try:
            self._db = await self._run(executor, self._open)
        except (OSError, *dbm.error) as e:
            executor.shutdown(wait=False)
            raise StorageUnavailable(f"Cannot open key/value file {self._path}: {e}") from e
        self._executor = executor

    def _open(self):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        return dbm.open(str(self._path), "c")

    @staticmethod
    async def _run(executor: ThreadPoolExecutor, func, *args):
        return await asyncio.get_running_loop().run_in_executor(executor, func, *args)

    def _require_db(self):
        if self._db is None or self._executor is None:
            raise StorageUnavailable(f"Key/value file {self._path} is not open")
        return self._db, self._executor

    async def get_item(self, key: str) -> str | None:
        db, executor = self._require_db()
        value = await self._run(executor, db.get, key.encode("utf-8"))
        return value.decode("utf-8") if value is not None else None

    async def set_item(self, key: str, value: str) -> None:
        db, executor = self._require_db()
        await self._run(executor, self._write, db, key, value)

    @staticmethod
    def _write(db, key: str, value: str) -> None:
        db[key.encode("utf-8")] = value.encode("utf-8")
        # dbm.dumb and dbm.gnu buffer writes until sync()
        sync = getattr(db, "sync", None)
        if sync is not None:
            sync()

    async def close(self) -> None:
        if self._db is None or self._executor is None:
            return
        db, self._db = self._db, None
        executor, self._executor = self._executor, None
        try:
            await self._run(executor, db.close)
        finally:
            executor.shutdown(wait=False)


class RedisKeyValueStore(KeyValueStore):
    """Store backed by a Redis server."""

    def __init__(self, redis_client):
        self._redis = redis_client

    async def open(self) -> None:
        if not await self.ping():
            raise StorageUnavailable("Redis ping failed")

    async def ping(self) -> bool:
        """Test Redis connection health."""
        try:
            await self._redis.ping()
            return True
        except (RedisError, OSError) as e:
            logger.warning("Redis ping failed: {}", e)
            return False

    async def get_item(self, key: str) -> str | None:
        data = await self._redis.get(key)
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return data

    async def set_item(self, key: str, value: str) -> None:
        await self._redis.set(key, value)

    async def close(self) -> None:
        await self._redis.aclose()


class KeyValueProductStorage(ProductStorage):
    """Products kept as one serialized JSON array under a single key.

    New ids are ``max(existing ids) + 1``, so the id of a deleted
    highest-numbered product is handed out again.
    """

    backend = StorageBackend.KEY_VALUE

    def __init__(self, store: KeyValueStore, storage_key: str = DEFAULT_STORAGE_KEY):
        super().__init__()
        self._store = store
        self._key = storage_key
        self._open = False
        # Read-modify-write of the collection must not interleave
        self._lock = asyncio.Lock()

    @property
    def storage_key(self) -> str:
        return self._key

    async def init(self) -> None:
        """Open the store and seed an empty collection when the key is absent."""
        if self._open:
            return
        await self._store.open()
        try:
            if await self._store.get_item(self._key) is None:
                await self._store.set_item(self._key, "[]")
        except Exception:
            await self._store.close()
            raise
        self._open = True
        logger.info("Key/value product storage ready under key {!r}", self._key)

    def _require_open(self) -> None:
        if not self._open:
            raise StorageUnavailable("Product storage is not initialized; call init() first")

    async def _load(self) -> list[Product]:
        self._require_open()
        raw = await self._store.get_item(self._key)
        if raw is None:
            return []
        return _PRODUCT_LIST.validate_json(raw)

    async def _save(self, products: list[Product]) -> None:
        payload = _PRODUCT_LIST.dump_json(products, by_alias=True).decode("utf-8")
        await self._store.set_item(self._key, payload)

    async def get_all(self) -> list[Product]:
        return _newest_first(await self._load())

    async def get_by_id(self, product_id: int) -> Product | None:
        for product in await self._load():
            if product.id == product_id:
                return product
        return None

    async def create(self, data: ProductCreate) -> Product:
        async with self._lock:
            products = await self._load()
            now = self._next_timestamp()
            product = Product(
                id=_next_id(products),
                **data.model_dump(),
                created_at=now,
                updated_at=now,
            )
            products.append(product)
            await self._save(products)

        logger.debug("Created product {} ({})", product.id, product.name)
        return product

    async def update(self, data: ProductUpdate) -> Product:
        changes = self._changes_for(data)
        async with self._lock:
            products = await self._load()
            index = next(
                (i for i, product in enumerate(products) if product.id == data.id), None
            )
            if index is None:
                raise ProductNotFound(data.id)

            current = products[index]
            updated = current.model_copy(
                update={
                    **changes,
                    "updated_at": self._next_timestamp(floor=current.updated_at),
                }
            )
            products[index] = updated
            await self._save(products)

        logger.debug("Updated product {} fields {}", updated.id, sorted(changes))
        return updated

    async def delete(self, product_id: int) -> bool:
        async with self._lock:
            products = await self._load()
            remaining = [product for product in products if product.id != product_id]
            if len(remaining) == len(products):
                return False
            await self._save(remaining)

        logger.debug("Deleted product {}", product_id)
        return True

    async def search(self, query: str) -> list[Product]:
        needle = query.casefold()
        products = await self._load()
        return _newest_first(p for p in products if needle in p.name.casefold())

    async def close(self) -> None:
        if not self._open:
            return
        self._open = False
        await self._store.close()
        logger.info("Key/value product storage under key {!r} closed", self._key)


def _next_id(products: list[Product]) -> int:
    return max((product.id for product in products), default=0) + 1


def _newest_first(products) -> list[Product]:
    # sorted() is stable with reverse=True, so ties keep insertion order
    return sorted(products, key=attrgetter("updated_at"), reverse=True)
