"""In-memory product list kept in step with the store."""

from loguru import logger

from src.stockroom.core.storage.product_storage import ProductStorage
from src.stockroom.entities.product import Product, ProductCreate, ProductUpdate


class ProductCatalog:
    """Presentation-side view of the products.

    ``products`` is a disposable cache: the store stays the source of truth.
    Every operation logs and re-raises storage failures, leaving the cache
    exactly as it was before the call.
    """

    def __init__(self, storage: ProductStorage):
        self._storage = storage
        self.products: list[Product] = []

    @property
    def storage(self) -> ProductStorage:
        return self._storage

    async def load(self) -> list[Product]:
        try:
            self.products = await self._storage.get_all()
        except Exception:
            logger.exception("Error loading products")
            raise
        return self.products

    async def refresh(self) -> list[Product]:
        return await self.load()

    async def get(self, product_id: int) -> Product | None:
        try:
            return await self._storage.get_by_id(product_id)
        except Exception:
            logger.exception("Error fetching product {}", product_id)
            raise

    async def create(self, data: ProductCreate) -> Product:
        try:
            product = await self._storage.create(data)
        except Exception:
            logger.exception("Error creating product")
            raise
        self.products = [product, *self.products]
        return product

    async def update(self, data: ProductUpdate) -> Product:
        try:
            product = await self._storage.update(data)
        except Exception:
            logger.exception("Error updating product {}", data.id)
            raise
        self.products = [product if p.id == product.id else p for p in self.products]
        return product

    async def delete(self, product_id: int) -> bool:
        try:
            deleted = await self._storage.delete(product_id)
        except Exception:
            logger.exception("Error deleting product {}", product_id)
            raise
        if deleted:
            self.products = [p for p in self.products if p.id != product_id]
        return deleted

    async def search(self, query: str) -> list[Product]:
        """Replace the cache with products whose name contains ``query``.

        A blank query means no filter.
        """
        try:
            if query.strip():
                results = await self._storage.search(query)
            else:
                results = await self._storage.get_all()
        except Exception:
            logger.exception("Error searching products for {!r}", query)
            raise
        self.products = results
        return results
