"""Sample data for an empty product store."""

from collections.abc import Sequence

from loguru import logger

from src.stockroom.core.storage.product_storage import ProductStorage
from src.stockroom.entities.product import ProductCreate

SAMPLE_PRODUCTS: tuple[ProductCreate, ...] = (
    ProductCreate(name="Smartphone Samsung Galaxy S23", quantity=15, price=2599.99),
    ProductCreate(name="Notebook Dell Inspiron 15", quantity=8, price=3299.90),
    ProductCreate(name="Fone de Ouvido Sony WH-1000XM4", quantity=0, price=899.99),
    ProductCreate(name="Tablet Apple iPad Air", quantity=3, price=4199.00),
    ProductCreate(name="Teclado Mecânico Logitech G Pro", quantity=25, price=549.90),
    ProductCreate(name="Mouse Gamer Razer DeathAdder V3", quantity=12, price=299.99),
    ProductCreate(name='Monitor LG UltraWide 29"', quantity=4, price=1299.00),
    ProductCreate(name="SSD Kingston NV2 1TB", quantity=18, price=329.90),
)


async def populate_sample_data(
    storage: ProductStorage,
    products: Sequence[ProductCreate] = SAMPLE_PRODUCTS,
) -> int:
    """Fill an empty store with sample products.

    Does nothing when the store already holds at least one product.

    Args:
        storage: Initialized product storage
        products: Records to create, in order

    Returns:
        Number of products created
    """
    existing = await storage.get_all()
    if existing:
        logger.info("Store already has {} products, skipping sample data", len(existing))
        return 0

    logger.info("Populating store with {} sample products", len(products))
    for data in products:
        await storage.create(data)

    logger.info("Added {} sample products", len(products))
    return len(products)
