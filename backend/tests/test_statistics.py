from datetime import timedelta

import pytest
import pytest_asyncio

from core.converters import today
from core.errors import ErrorKind
from db.database import MenuStatistic, StockStatistic
from scripts import create_daily_stats
from services import menus, orders, sales, statistics, stock
from services.menus import Ingredient
from services.stock import ShortagePolicy
from helpers import assert_err


@pytest_asyncio.fixture
async def two_menus(db):
    soup = await menus.create_menu(db, "Soup", 5.0)
    salad = await menus.create_menu(db, "Salad", 7.0)
    return soup.value.menu_id, salad.value.menu_id


def counts(stats):
    return {s.menu_id: s.count for s in stats}


class TestMenuStatistics:
    """Orders bump today's count of every menu they contain."""

    @pytest.mark.asyncio
    async def test_each_menu_entry_is_counted(self, db, user_id, two_menus):
        soup, salad = two_menus
        await orders.place_order(db, None, user_id, None, [soup, soup, salad])
        await orders.place_order(db, None, user_id, None, [soup])

        today_stats = await statistics.get_menus_today(db)

        assert counts(today_stats) == {soup: 3, salad: 1}
        assert {s.to_schema["name"] for s in today_stats} == {"Soup", "Salad"}

    @pytest.mark.asyncio
    async def test_rejected_order_is_not_counted(self, db, user_id):
        await stock.add_or_edit(db, "Flour", 0.5, "kg")
        bread = (await menus.create_menu(db, "Bread", 4.0, ingredients=[Ingredient("Flour", 1.0, "kg")])).value.menu_id

        res = await orders.place_order(db, None, user_id, None, [bread], policy=ShortagePolicy.REJECT)

        assert_err(res, ErrorKind.CONFLICT, "quantity")
        assert await statistics.get_menus_today(db) == []

    @pytest.mark.asyncio
    async def test_ensure_today_adds_zero_rows_once(self, db, user_id, two_menus):
        soup, salad = two_menus
        await orders.place_order(db, None, user_id, None, [soup])

        first = await statistics.ensure_menus_today(db)
        second = await statistics.ensure_menus_today(db)

        assert counts(first.value) == {soup: 1, salad: 0}
        assert counts(second.value) == {soup: 1, salad: 0}
        assert (await statistics.get_menu_today(db, salad)).value.count == 0
        assert_err(await statistics.get_menu_today(db, 999), ErrorKind.NOT_FOUND, "menu_id")

    @pytest.mark.asyncio
    async def test_week_covers_last_seven_days(self, db, two_menus):
        soup, salad = two_menus
        for days_ago in (0, 6, 7):
            db.add(MenuStatistic(menu_id=soup, day=today() - timedelta(days=days_ago), count=days_ago + 1))
        db.add(MenuStatistic(menu_id=salad, day=today(), count=2))
        await db.commit()

        week = await statistics.get_menus_week(db)
        soup_week = await statistics.get_menus_week(db, soup)

        assert [(s.day, s.menu_id) for s in week] == [
            (today() - timedelta(days=6), soup),
            (today(), soup),
            (today(), salad),
        ]
        assert [s.count for s in soup_week] == [7, 1]


class TestStockStatistics:
    @pytest.mark.asyncio
    async def test_snapshot_records_current_levels(self, db):
        await stock.add_or_edit(db, "Flour", 2.0, "kg")
        await stock.add_or_edit(db, "Tomato", 5.0, "piece")
        first = await statistics.snapshot_stock(db)
        assert {s.to_schema["name"]: s.units for s in first.value} == {"Flour": 2.0, "Tomato": 5.0}

        await stock.decrement(db, "Flour", 0.5)
        second = await statistics.snapshot_stock(db)

        assert len(second.value) == 2
        flour = (await statistics.get_stock_item_today(db, "flour")).value
        assert flour.units == pytest.approx(1.5)
        assert flour.to_schema["unit"] == "kg"

    @pytest.mark.asyncio
    async def test_empty_stock(self, db):
        assert (await statistics.snapshot_stock(db)).value == []

    @pytest.mark.asyncio
    async def test_item_lookups(self, db):
        assert_err(await statistics.get_stock_item_today(db, "Nothing"), ErrorKind.NOT_FOUND, "name")
        await stock.add_or_edit(db, "Basil", 3.0, "bunch")
        assert_err(await statistics.get_stock_item_today(db, "Basil"), ErrorKind.NOT_FOUND, "name")
        assert_err(await statistics.get_stock_week(db, "Nothing"), ErrorKind.NOT_FOUND, "name")

    @pytest.mark.asyncio
    async def test_week_for_one_item(self, db):
        flour = (await stock.add_or_edit(db, "Flour", 2.0, "kg")).value.stock_id
        rice = (await stock.add_or_edit(db, "Rice", 1.0, "kg")).value.stock_id
        for days_ago in (1, 8):
            db.add(StockStatistic(stock_id=flour, day=today() - timedelta(days=days_ago), units=4.0))
        db.add(StockStatistic(stock_id=rice, day=today(), units=1.0))
        await db.commit()

        week = await statistics.get_stock_week(db, "Flour")

        assert [(s.stock_id, s.day) for s in week.value] == [(flour, today() - timedelta(days=1))]
        assert len((await statistics.get_stock_week(db)).value) == 2


class TestDailyJob:
    @pytest.mark.asyncio
    async def test_opens_every_statistic_for_today(self, db, session_maker, two_menus, monkeypatch):
        await stock.add_or_edit(db, "Flour", 2.0, "kg")
        monkeypatch.setattr(create_daily_stats, "async_session_maker", session_maker)

        assert await create_daily_stats.main() == 0

        assert float((await sales.get_today(db)).value.benefits) == 0.0
        assert [s.units for s in await statistics.get_stock_today(db)] == [2.0]
        assert counts(await statistics.get_menus_today(db)) == dict.fromkeys(two_menus, 0)
