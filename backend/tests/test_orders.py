from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from core.errors import ErrorKind
from db.database import Order, OrderMenu
from services import bookings, menus, orders, payments, stock
from services.menus import Ingredient
from services.stock import ShortagePolicy
from helpers import add_tables, assert_err, later


async def quantity(db, name):
    return (await stock.get_stock(db, name)).value.quantity


async def count_orders(db):
    return (await db.execute(select(func.count()).select_from(Order))).scalar_one()


@pytest_asyncio.fixture
async def kitchen(db):
    """Tomato (id 1) then Flour (id 2), and two menus using them."""
    await stock.add_or_edit(db, "Tomato", 10.0, "piece")
    await stock.add_or_edit(db, "Flour", 1.0, "kg")
    pizza = await menus.create_menu(
        db, "Pizza", 12.50, ingredients=[Ingredient("Tomato", 2.0, "piece"), Ingredient("Flour", 250.0, "g")]
    )
    bread = await menus.create_menu(db, "Bread", 8.00, ingredients=[Ingredient("Flour", 0.5, "kg")])
    return {"pizza": pizza.value.menu_id, "bread": bread.value.menu_id}


class TestPlaceOrder:
    @pytest.mark.asyncio
    async def test_total_and_stock_consumption(self, db, user_id, kitchen):
        res = await orders.place_order(db, None, user_id, "no basil", [kitchen["pizza"], kitchen["bread"]])

        assert res.ok
        order = res.value
        assert float(order.total_price) == pytest.approx(20.50)
        assert order.is_take_away is True
        assert order.to_schema["menu_ids"] == [kitchen["pizza"], kitchen["bread"]]
        assert await quantity(db, "Tomato") == pytest.approx(8.0)
        assert await quantity(db, "Flour") == pytest.approx(0.25)

    @pytest.mark.asyncio
    async def test_repeated_menu_is_counted_each_time(self, db, user_id, kitchen):
        res = await orders.place_order(db, None, user_id, None, [kitchen["pizza"]] * 3)
        assert float(res.value.total_price) == pytest.approx(37.50)
        assert await quantity(db, "Tomato") == pytest.approx(4.0)
        entries = (await db.execute(select(func.count()).select_from(OrderMenu))).scalar_one()
        assert entries == 3

    @pytest.mark.asyncio
    async def test_shortage_is_clamped_by_default(self, db, user_id, kitchen):
        res = await orders.place_order(db, None, user_id, None, [kitchen["bread"]] * 3)
        assert res.ok
        assert await quantity(db, "Flour") == 0.0

    @pytest.mark.asyncio
    async def test_rejected_shortage_rolls_back_everything(self, db, user_id, kitchen):
        pizzas = [kitchen["pizza"]] * 5  # 10 tomatoes, but 1.25 kg of flour

        res = await orders.place_order(db, None, user_id, None, pizzas, policy=ShortagePolicy.REJECT)

        assert_err(res, ErrorKind.CONFLICT, "quantity")
        assert await quantity(db, "Tomato") == pytest.approx(10.0)
        assert await quantity(db, "Flour") == pytest.approx(1.0)
        assert await count_orders(db) == 0

    @pytest.mark.asyncio
    async def test_missing_ingredient_gets_placeholder(self, db, user_id):
        menu = await menus.create_menu(db, "Risotto", 15.0, ingredients=[Ingredient("Saffron", 2.0, "pinch")])
        res = await orders.place_order(db, None, user_id, None, [menu.value.menu_id])
        assert res.ok
        saffron = (await stock.get_stock(db, "Saffron")).value
        assert saffron.to_schema["unit"] == "kg"
        assert saffron.quantity == 0.0

    @pytest.mark.asyncio
    async def test_counted_ingredient_keeps_its_unit(self, db, user_id):
        menu_id = (
            await menus.create_menu(db, "Toast", 3.0, ingredients=[Ingredient("Bread", 2.0, "slice")])
        ).value.menu_id

        first = await orders.place_order(db, None, user_id, None, [menu_id])

        assert first.ok
        bread = (await stock.get_stock(db, "Bread")).value
        assert bread.to_schema["unit"] == "slice"

        await stock.receive(db, "Bread", 10.0, "slice")
        second = await orders.place_order(db, None, user_id, None, [menu_id, menu_id])
        assert second.ok
        assert await quantity(db, "Bread") == pytest.approx(6.0)

    @pytest.mark.asyncio
    async def test_incompatible_ingredient_unit(self, db, user_id, kitchen):
        menu = await menus.create_menu(db, "Odd", 1.0, ingredients=[Ingredient("Flour", 1.0, "1 cup")])
        res = await orders.place_order(db, None, user_id, None, [menu.value.menu_id])
        assert_err(res, ErrorKind.CONFLICT)
        assert await count_orders(db) == 0

    @pytest.mark.asyncio
    async def test_validation(self, db, user_id, kitchen):
        assert_err(await orders.place_order(db, None, user_id, None, []), ErrorKind.VALIDATION, "menus")
        assert_err(
            await orders.place_order(db, None, user_id, "x" * 1001, [kitchen["pizza"]]),
            ErrorKind.VALIDATION,
            "additional_infos",
        )
        assert_err(await orders.place_order(db, None, user_id, None, [999]), ErrorKind.NOT_FOUND, "menus")
        assert_err(await orders.place_order(db, None, uuid4(), None, [kitchen["pizza"]]), ErrorKind.NOT_FOUND)
        assert_err(await orders.place_order(db, 77, user_id, None, [kitchen["pizza"]]), ErrorKind.NOT_FOUND)
        assert await count_orders(db) == 0

    @pytest.mark.asyncio
    async def test_finished_booking_takes_no_orders(self, db, user_id, kitchen):
        await add_tables(db, 4)
        booking_id = (await bookings.create_booking(db, user_id, later(), 2)).value.booking_id
        await payments.pay_booking(db, booking_id)
        res = await orders.place_order(db, booking_id, user_id, None, [kitchen["pizza"]])
        assert_err(res, ErrorKind.CONFLICT, "booking_id")


class TestReadOrders:
    @pytest.mark.asyncio
    async def test_listings(self, db, user_id, kitchen):
        await add_tables(db, 4)
        booking_id = (await bookings.create_booking(db, user_id, later(), 2)).value.booking_id
        on_site = (await orders.place_order(db, booking_id, user_id, None, [kitchen["pizza"]])).value
        take_away = (await orders.place_order(db, None, user_id, None, [kitchen["bread"], kitchen["pizza"]])).value

        assert on_site.is_take_away is False
        assert [o.order_id for o in (await orders.list_booking_orders(db, booking_id)).value] == [on_site.order_id]
        assert len((await orders.list_user_orders(db, user_id)).value) == 2
        entries = (await orders.list_user_order_menus(db, user_id)).value
        assert [e.menu_id for e in entries] == [kitchen["pizza"], kitchen["bread"], kitchen["pizza"]]
        assert (await orders.get_order(db, take_away.order_id)).ok

    @pytest.mark.asyncio
    async def test_update_order(self, db, user_id, kitchen):
        order_id = (await orders.place_order(db, None, user_id, None, [kitchen["pizza"]])).value.order_id
        res = await orders.update_order(db, order_id, {"total_price": 10, "is_finished": True})
        assert float(res.value.total_price) == pytest.approx(10.0)
        assert res.value.is_finished is True
        assert_err(await orders.update_order(db, order_id, {"user_id": uuid4()}), ErrorKind.VALIDATION)
        assert_err(await orders.update_order(db, order_id, {"total_price": -1}), ErrorKind.VALIDATION)
