"""Services built on top of product storage."""

from .catalog import ProductCatalog
from .seed import SAMPLE_PRODUCTS, populate_sample_data

__all__ = ["ProductCatalog", "SAMPLE_PRODUCTS", "populate_sample_data"]
