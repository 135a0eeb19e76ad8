"""Errors raised by product storage backends."""


class StorageError(Exception):
    """Base class for errors raised deliberately by the persistence layer."""


class StorageUnavailable(StorageError):
    """The storage medium cannot be opened, or the storage is not initialized."""


class ProductNotFound(StorageError):
    """No product has the requested id."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class NoFieldsToUpdate(StorageError):
    """An update payload carried nothing besides the product id."""

    def __init__(self, product_id: int):
        super().__init__(f"No fields to update for product {product_id}")
        self.product_id = product_id
