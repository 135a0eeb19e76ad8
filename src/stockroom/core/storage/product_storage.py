"""Product storage interface.

Both backends (embedded relational database and flat key/value collection)
implement the same asynchronous contract so callers never need to know which
one the process selected.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from src.stockroom.core.storage.errors import NoFieldsToUpdate
from src.stockroom.entities.product import Product, ProductCreate, ProductUpdate


class StorageBackend(str, Enum):
    """Available storage backend kinds."""

    RELATIONAL = "relational"
    KEY_VALUE = "key_value"


class ProductStorage(ABC):
    """Abstract interface for product storage backends."""

    backend: StorageBackend

    def __init__(self) -> None:
        self._last_timestamp: datetime | None = None
        # Relational calls issue stamps from worker threads
        self._clock_lock = threading.Lock()

    @abstractmethod
    async def init(self) -> None:
        """Open the medium and create the product structure if absent.

        Idempotent; must complete before any other operation.

        Raises:
            StorageUnavailable: If the medium cannot be opened or created
        """

    @abstractmethod
    async def get_all(self) -> list[Product]:
        """List every product, most recently updated first.

        Returns:
            Products ordered by ``updated_at`` descending, ties in insertion order
        """

    @abstractmethod
    async def get_by_id(self, product_id: int) -> Product | None:
        """Fetch one product.

        Args:
            product_id: Product identifier

        Returns:
            The product, or None if no product has this id
        """

    @abstractmethod
    async def create(self, data: ProductCreate) -> Product:
        """Persist a new product.

        Args:
            data: Name, quantity, price and optional image reference

        Returns:
            The stored product with its id and timestamps
        """

    @abstractmethod
    async def update(self, data: ProductUpdate) -> Product:
        """Apply the explicitly supplied fields of ``data`` to an existing product.

        ``updated_at`` is refreshed on every successful call.

        Args:
            data: Product id plus the fields to change

        Returns:
            The updated product

        Raises:
            NoFieldsToUpdate: If ``data`` carries no field besides the id
            ProductNotFound: If no product has ``data.id``
        """

    @abstractmethod
    async def delete(self, product_id: int) -> bool:
        """Remove a product.

        Args:
            product_id: Product identifier

        Returns:
            True if a product was removed, False if none had this id
        """

    @abstractmethod
    async def search(self, query: str) -> list[Product]:
        """Case-insensitive substring search on product names.

        The query is matched literally; an empty query matches every product.

        Args:
            query: Text to look for

        Returns:
            Matching products in the same order as ``get_all``
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying resource. Safe to call when already closed."""

    def _next_timestamp(self, floor: datetime | None = None) -> datetime:
        """Return the current UTC time, strictly later than any stamp issued before.

        Args:
            floor: Timestamp the result must exceed (e.g. the record's ``updated_at``)
        """
        with self._clock_lock:
            now = datetime.now(UTC)
            for previous in (self._last_timestamp, floor):
                if previous is not None and now <= previous:
                    now = previous + timedelta(microseconds=1)
            self._last_timestamp = now
            return now

    @staticmethod
    def _changes_for(data: ProductUpdate) -> dict[str, Any]:
        changes = data.changes()
        if not changes:
            raise NoFieldsToUpdate(data.id)
        return changes
