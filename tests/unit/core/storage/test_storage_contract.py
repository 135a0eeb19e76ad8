"""Behaviour shared by every product storage backend.

Each test runs once per backend through the parametrized ``product_storage``
fixture.
"""

import asyncio

import pytest

from src.stockroom.core.storage import NoFieldsToUpdate, ProductNotFound, StorageUnavailable
from src.stockroom.entities.product import ProductCreate, ProductUpdate


def _widget(**overrides) -> ProductCreate:
    fields = {"name": "Widget", "quantity": 10, "price": 9.99}
    fields.update(overrides)
    return ProductCreate(**fields)


class TestInit:
    """Test storage initialization."""

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, product_storage):
        created = await product_storage.create(_widget())

        await product_storage.init()

        assert await product_storage.get_all() == [created]

    @pytest.mark.asyncio
    async def test_empty_store_lists_nothing(self, product_storage):
        assert await product_storage.get_all() == []
        assert await product_storage.search("") == []

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, product_storage):
        await product_storage.close()
        await product_storage.close()

    @pytest.mark.asyncio
    async def test_closed_storage_is_unavailable_until_reopened(self, product_storage):
        created = await product_storage.create(_widget())
        await product_storage.close()

        with pytest.raises(StorageUnavailable):
            await product_storage.get_all()

        await product_storage.init()
        assert await product_storage.get_all() == [created]


class TestCreate:
    """Test product creation."""

    @pytest.mark.asyncio
    async def test_first_product_gets_id_one(self, product_storage):
        product = await product_storage.create(_widget())

        assert product.id == 1
        assert product.name == "Widget"
        assert product.quantity == 10
        assert product.price == 9.99
        assert product.image_uri is None
        assert product.created_at == product.updated_at

    @pytest.mark.asyncio
    async def test_second_product_gets_next_id(self, product_storage):
        await product_storage.create(_widget())
        second = await product_storage.create(_widget(name="Gadget", quantity=0, price=1.5))

        assert second.id == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [
            _widget(),
            _widget(quantity=0, price=0),
            _widget(name="Fone de Ouvido Sony WH-1000XM4", image_uri="file:///img/1.png"),
        ],
    )
    async def test_created_product_reads_back_equal(self, product_storage, data):
        created = await product_storage.create(data)

        assert await product_storage.get_by_id(created.id) == created

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, product_storage):
        products = [await product_storage.create(_widget(name=f"P{i}")) for i in range(5)]

        assert len({p.id for p in products}) == 5


class TestGetAll:
    """Test listing order and counts."""

    @pytest.mark.asyncio
    async def test_count_after_creates_and_deletes(self, product_storage):
        created = [await product_storage.create(_widget(name=f"P{i}")) for i in range(5)]
        for product in created[1:3]:
            assert await product_storage.delete(product.id) is True

        products = await product_storage.get_all()

        assert len(products) == 3
        assert {p.id for p in products} == {created[0].id, created[3].id, created[4].id}

    @pytest.mark.asyncio
    async def test_most_recently_updated_first(self, product_storage):
        first = await product_storage.create(_widget(name="First"))
        second = await product_storage.create(_widget(name="Second"))
        third = await product_storage.create(_widget(name="Third"))

        await product_storage.update(ProductUpdate(id=first.id, quantity=1))

        names = [p.name for p in await product_storage.get_all()]
        assert names == ["First", "Third", "Second"]

        stamps = [p.updated_at for p in await product_storage.get_all()]
        assert stamps == sorted(stamps, reverse=True)
        assert second.id != third.id

    @pytest.mark.asyncio
    async def test_get_by_id_absent(self, product_storage):
        assert await product_storage.get_by_id(42) is None


class TestUpdate:
    """Test partial updates."""

    @pytest.mark.asyncio
    async def test_only_supplied_field_changes(self, product_storage):
        original = await product_storage.create(_widget(image_uri="file://a.png"))

        updated = await product_storage.update(ProductUpdate(id=original.id, quantity=5))

        assert updated.quantity == 5
        assert updated.name == original.name
        assert updated.price == original.price
        assert updated.image_uri == original.image_uri
        assert updated.created_at == original.created_at
        assert updated.updated_at > original.updated_at
        assert await product_storage.get_by_id(original.id) == updated

    @pytest.mark.asyncio
    async def test_set_image_keeps_other_fields(self, product_storage):
        original = await product_storage.create(_widget())

        await product_storage.update(ProductUpdate(id=1, image_uri="file://x.png"))
        fetched = await product_storage.get_by_id(1)

        assert fetched.image_uri == "file://x.png"
        assert (fetched.name, fetched.quantity, fetched.price) == (
            original.name,
            original.quantity,
            original.price,
        )
        assert fetched.updated_at > fetched.created_at

    @pytest.mark.asyncio
    async def test_explicit_none_clears_image(self, product_storage):
        original = await product_storage.create(_widget(image_uri="file://a.png"))

        updated = await product_storage.update(ProductUpdate(id=original.id, image_uri=None))

        assert updated.image_uri is None

    @pytest.mark.asyncio
    async def test_unchanged_values_still_refresh_timestamp(self, product_storage):
        original = await product_storage.create(_widget())

        updated = await product_storage.update(ProductUpdate(id=original.id, name="Widget"))

        assert updated.updated_at > original.updated_at

    @pytest.mark.asyncio
    async def test_consecutive_updates_keep_increasing(self, product_storage):
        product = await product_storage.create(_widget())
        stamps = [product.updated_at]
        for quantity in range(3):
            product = await product_storage.update(ProductUpdate(id=product.id, quantity=quantity))
            stamps.append(product.updated_at)

        assert stamps == sorted(set(stamps))

    @pytest.mark.asyncio
    async def test_missing_product_raises_not_found(self, product_storage):
        with pytest.raises(ProductNotFound) as exc_info:
            await product_storage.update(ProductUpdate(id=99, quantity=5))

        assert exc_info.value.product_id == 99
        assert await product_storage.get_all() == []

    @pytest.mark.asyncio
    async def test_empty_payload_raises_no_fields(self, product_storage):
        original = await product_storage.create(_widget())

        with pytest.raises(NoFieldsToUpdate):
            await product_storage.update(ProductUpdate(id=original.id))

        assert await product_storage.get_by_id(original.id) == original

    @pytest.mark.asyncio
    async def test_empty_payload_checked_before_existence(self, product_storage):
        with pytest.raises(NoFieldsToUpdate):
            await product_storage.update(ProductUpdate(id=99))


class TestDelete:
    """Test product removal."""

    @pytest.mark.asyncio
    async def test_delete_existing(self, product_storage):
        product = await product_storage.create(_widget())

        assert await product_storage.delete(product.id) is True
        assert await product_storage.get_by_id(product.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing_leaves_store_unchanged(self, product_storage):
        product = await product_storage.create(_widget())

        assert await product_storage.delete(product.id + 1) is False
        assert await product_storage.get_all() == [product]


class TestSearch:
    """Test name search."""

    @pytest.fixture
    async def stocked(self, product_storage):
        for name in ("Mouse Gamer", "Teclado Mecânico", "Monitor LG", "mousepad"):
            await product_storage.create(_widget(name=name))
        return product_storage

    @pytest.mark.asyncio
    async def test_case_insensitive(self, stocked):
        names = {p.name for p in await stocked.search("mouse")}

        assert names == {"Mouse Gamer", "mousepad"}

    @pytest.mark.asyncio
    async def test_upper_case_query(self, stocked):
        names = {p.name for p in await stocked.search("MECÂNICO")}

        assert names == {"Teclado Mecânico"}

    @pytest.mark.asyncio
    async def test_empty_query_matches_everything(self, stocked):
        assert {p.id for p in await stocked.search("")} == {p.id for p in await stocked.get_all()}

    @pytest.mark.asyncio
    async def test_no_match(self, stocked):
        assert await stocked.search("tablet") == []

    @pytest.mark.asyncio
    async def test_same_order_as_get_all(self, stocked):
        await stocked.update(ProductUpdate(id=1, price=1.0))

        ordered = [p.id for p in await stocked.get_all()]
        found = [p.id for p in await stocked.search("o")]

        assert found == [product_id for product_id in ordered if product_id in found]

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, product_storage):
        await product_storage.create(_widget(name="100% algodão"))
        await product_storage.create(_widget(name="1000 parafusos"))
        await product_storage.create(_widget(name="cabo_usb"))
        await product_storage.create(_widget(name="cabo usb"))

        assert [p.name for p in await product_storage.search("0%")] == ["100% algodão"]
        assert [p.name for p in await product_storage.search("o_u")] == ["cabo_usb"]


class TestConcurrency:
    """Test overlapping calls on one instance."""

    @pytest.mark.asyncio
    async def test_concurrent_creates_keep_every_record(self, product_storage):
        created = await asyncio.gather(
            *(product_storage.create(_widget(name=f"P{i}")) for i in range(10))
        )

        assert len({p.id for p in created}) == 10
        assert len(await product_storage.get_all()) == 10
