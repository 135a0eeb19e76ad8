"""Entities module with an entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model and payload validation
- table.py: Database persistence model
"""

from .product import Product, ProductCreate, ProductTable, ProductUpdate

__all__ = [
    "Product",
    "ProductCreate",
    "ProductTable",
    "ProductUpdate",
]
