"""Unit tests for the Product entity and its payloads."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from src.stockroom.entities.product import Product, ProductCreate, ProductUpdate


class TestProductCreate:
    """Test creation payload validation."""

    def test_minimal_payload(self):
        data = ProductCreate(name="Widget", quantity=10, price=9.99)

        assert data.name == "Widget"
        assert data.image_uri is None

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "", "quantity": 1, "price": 1.0},
            {"name": "Widget", "quantity": -1, "price": 1.0},
            {"name": "Widget", "quantity": 1, "price": -0.01},
            {"name": "Widget", "quantity": 1, "price": float("nan")},
            {"name": "Widget", "quantity": 1.5, "price": 1.0},
        ],
    )
    def test_rejects_invalid_values(self, fields):
        with pytest.raises(ValidationError):
            ProductCreate(**fields)

    def test_accepts_camel_case_keys(self):
        data = ProductCreate.model_validate(
            {"name": "Widget", "quantity": 1, "price": 2.0, "imageUri": "file://w.png"}
        )
        assert data.image_uri == "file://w.png"


class TestProductUpdate:
    """Test partial update payloads."""

    def test_changes_only_contains_supplied_fields(self):
        data = ProductUpdate(id=1, quantity=5)

        assert data.changes() == {"quantity": 5}

    def test_changes_empty_when_only_id(self):
        assert ProductUpdate(id=1).changes() == {}

    def test_explicit_none_clears_image(self):
        data = ProductUpdate(id=1, image_uri=None)

        assert data.changes() == {"image_uri": None}

    @pytest.mark.parametrize("field_name", ["name", "quantity", "price"])
    def test_required_fields_cannot_be_nulled(self, field_name):
        with pytest.raises(ValidationError, match="cannot be set to null"):
            ProductUpdate(id=1, **{field_name: None})

    def test_id_is_mandatory(self):
        with pytest.raises(ValidationError):
            ProductUpdate(name="Widget")  # type: ignore[call-arg]

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            ProductUpdate(id=1, name="")


class TestProduct:
    """Test the stored product model."""

    def _product(self, **overrides) -> Product:
        now = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)
        fields = {
            "id": 1,
            "name": "Widget",
            "quantity": 10,
            "price": 9.99,
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Product(**fields)

    def test_naive_timestamps_are_utc(self):
        product = self._product(created_at=datetime(2024, 5, 1, 12, 0, 0))

        assert product.created_at.tzinfo is UTC
        assert product.created_at == datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

    def test_aware_timestamps_are_converted_to_utc(self):
        local = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone(timedelta(hours=-3)))
        product = self._product(updated_at=local)

        assert product.updated_at == datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

    def test_json_uses_camel_case(self):
        product = self._product(image_uri="file://x.png")

        dumped = product.model_dump(mode="json", by_alias=True)

        assert set(dumped) == {
            "id",
            "name",
            "quantity",
            "price",
            "imageUri",
            "createdAt",
            "updatedAt",
        }
        assert Product.model_validate(dumped) == product
