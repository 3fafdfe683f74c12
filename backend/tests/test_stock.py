from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql.expression import Insert

from core.errors import ErrorKind
from db.database import Stock
from services import stock
from services.stock import ShortagePolicy
from helpers import assert_err, interleave_before_write


async def add_flour(db, quantity=1.0):
    res = await stock.add_or_edit(db, "Flour", quantity, "kg", unit_price=1.2, is_cookable=True)
    assert res.ok
    return res.value


class TestAddOrEdit:
    @pytest.mark.asyncio
    async def test_create_then_edit_by_name(self, db):
        created = await add_flour(db)
        edited = await stock.add_or_edit(db, "  flour ", 3.0, "g")

        assert edited.value.stock_id == created.stock_id
        assert edited.value.quantity == 3.0
        assert edited.value.to_schema["unit"] == "g"
        assert len(await stock.list_stocks(db)) == 1

    @pytest.mark.asyncio
    async def test_unit_must_be_a_stock_unit(self, db):
        assert_err(await stock.add_or_edit(db, "Salt", 1.0, "pinch"), ErrorKind.VALIDATION, "unit")
        assert_err(await stock.add_or_edit(db, "Salt", 1.0, "stone"), ErrorKind.NOT_FOUND, "unit")

    @pytest.mark.asyncio
    async def test_rejects_negative_quantity(self, db):
        assert_err(await stock.add_or_edit(db, "Salt", -1.0, "kg"), ErrorKind.VALIDATION, "quantity")

    @pytest.mark.asyncio
    async def test_rejects_inverted_use_by_window(self, db):
        res = await stock.add_or_edit(
            db, "Milk", 1.0, "L", use_by_date_min=date(2030, 5, 2), use_by_date_max=date(2030, 5, 1)
        )
        assert_err(res, ErrorKind.VALIDATION, "use_by_date_min")


class TestUpdate:
    @pytest.mark.asyncio
    async def test_unit_change_converts_quantity(self, db):
        await add_flour(db, 1.5)
        res = await stock.update_stock(db, "Flour", {"unit": "g"})
        assert res.value.quantity == pytest.approx(1500.0)

    @pytest.mark.asyncio
    async def test_rename_conflict(self, db):
        await add_flour(db)
        await stock.add_or_edit(db, "Sugar", 1.0, "kg")
        assert_err(await stock.update_stock(db, "Sugar", {"name": "FLOUR"}), ErrorKind.CONFLICT, "name")

    @pytest.mark.asyncio
    async def test_delete(self, db):
        await add_flour(db)
        assert (await stock.delete_stock(db, "flour")).ok
        assert_err(await stock.get_stock(db, "Flour"), ErrorKind.NOT_FOUND)


class TestDecrement:
    """Stock never goes negative."""

    @pytest.mark.asyncio
    async def test_enough_stock(self, db):
        await add_flour(db, 1.0)
        res = await stock.decrement(db, "Flour", 0.25)
        assert res.value.quantity == pytest.approx(0.75)

    @pytest.mark.asyncio
    async def test_clamp_floors_at_zero(self, db):
        await add_flour(db, 1.0)
        res = await stock.decrement(db, "Flour", 3.0, ShortagePolicy.CLAMP)
        assert res.value.quantity == 0.0

    @pytest.mark.asyncio
    async def test_reject_leaves_quantity_untouched(self, db):
        await add_flour(db, 1.0)
        res = await stock.decrement(db, "Flour", 3.0, ShortagePolicy.REJECT)
        assert_err(res, ErrorKind.CONFLICT, "quantity")
        assert (await stock.get_stock(db, "Flour")).value.quantity == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_exact_amount_under_reject(self, db):
        await add_flour(db, 1.0)
        res = await stock.decrement(db, "Flour", 1.0, ShortagePolicy.REJECT)
        assert res.value.quantity == 0.0


class TestPlaceholder:
    @pytest.mark.asyncio
    async def test_created_with_zero_quantity(self, db):
        res = await stock.get_or_create(db, "Apple", "piece")
        assert res.value.quantity == 0.0
        assert res.value.to_schema["unit"] == "piece"
        assert res.value.is_orderable is False

    @pytest.mark.asyncio
    async def test_portion_unit_falls_back_to_reference_unit(self, db):
        res = await stock.get_or_create(db, "Saffron", "pinch")
        assert res.value.to_schema["unit"] == "kg"

    @pytest.mark.asyncio
    async def test_existing_item_is_returned(self, db):
        flour = await add_flour(db, 2.0)
        again = await stock.get_or_create(db, "flour", "g")
        assert again.value.stock_id == flour.stock_id
        assert again.value.quantity == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_concurrent_creation_under_another_case(self, db, session_maker, monkeypatch):
        async def create_elsewhere():
            async with session_maker() as other:
                assert (await stock.add_or_edit(other, "TOMATO", 3.0, "piece")).ok

        interleave_before_write(monkeypatch, db, Stock.__table__, create_elsewhere, Insert)

        res = await stock.get_or_create(db, "tomato", "piece")

        assert res.value.name == "TOMATO"
        assert res.value.quantity == pytest.approx(3.0)
        assert [s.name for s in await stock.list_stocks(db)] == ["TOMATO"]

    @pytest.mark.asyncio
    async def test_names_are_unique_regardless_of_case(self, db):
        basil = (await stock.add_or_edit(db, "Basil", 1.0, "bunch")).value
        db.add(Stock(name="BASIL", quantity=0.0, unit_id=basil.unit_id))
        with pytest.raises(IntegrityError):
            await db.flush()
        await db.rollback()


class TestReceive:
    @pytest.mark.asyncio
    async def test_delivery_is_converted(self, db):
        await add_flour(db, 1.0)
        res = await stock.receive(db, "Flour", 500.0, "g")
        assert res.value.quantity == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_incompatible_delivery(self, db):
        await add_flour(db, 1.0)
        assert_err(await stock.receive(db, "Flour", 1.0, "L"), ErrorKind.CONFLICT)
        assert (await stock.get_stock(db, "Flour")).value.quantity == pytest.approx(1.0)
