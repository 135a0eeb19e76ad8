"""Entity: Product."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# JSON keys follow the camelCase layout of the persisted collection
_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    from_attributes=True,
)

_REQUIRED_FIELDS = ("name", "quantity", "price")


class Product(BaseModel):
    """A stocked product as persisted by a storage backend.

    ``id`` and both timestamps are assigned by the store; callers never
    provide them directly.
    """

    model_config = _WIRE_CONFIG

    id: int = Field(description="Store-assigned identifier")
    name: str = Field(min_length=1, description="Product name")
    quantity: int = Field(ge=0, description="Units in stock")
    price: float = Field(ge=0, allow_inf_nan=False, description="Unit price")
    image_uri: str | None = Field(
        default=None, description="Opaque reference to an externally stored image"
    )
    created_at: datetime = Field(description="Creation time (UTC)")
    updated_at: datetime = Field(description="Time of the last mutation (UTC)")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive values; everything is written in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class ProductCreate(BaseModel):
    """Payload for creating a product."""

    model_config = _WIRE_CONFIG

    name: str = Field(min_length=1)
    quantity: int = Field(ge=0)
    price: float = Field(ge=0, allow_inf_nan=False)
    image_uri: str | None = None


class ProductUpdate(BaseModel):
    """Partial update payload.

    Only fields that were explicitly given are applied. Passing
    ``image_uri=None`` clears the image; ``name``, ``quantity`` and ``price``
    cannot be cleared.
    """

    model_config = _WIRE_CONFIG

    id: int
    name: str | None = Field(default=None, min_length=1)
    quantity: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    image_uri: str | None = None

    @model_validator(mode="after")
    def _reject_null_required(self) -> "ProductUpdate":
        for field_name in _REQUIRED_FIELDS:
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be set to null")
        return self

    def changes(self) -> dict[str, Any]:
        """Return the explicitly supplied fields, keyed by field name, without ``id``."""
        return self.model_dump(exclude_unset=True, exclude={"id"})
