import pytest
from sqlalchemy import update

from core.errors import ErrorKind
from db.database import MeasurementUnit
from services import menus
from services.menus import Ingredient
from helpers import assert_err


class TestMenus:
    @pytest.mark.asyncio
    async def test_create_and_read_ingredients(self, db):
        res = await menus.create_menu(
            db, "Pancakes", 7.5, "Stack of three", [Ingredient("Flour", 150.0, "g"), Ingredient("Milk", 1.0, "1 cup")]
        )
        assert res.ok
        ingredients = (await menus.get_menu_ingredients(db, res.value.menu_id)).value
        assert ingredients == [Ingredient("Flour", 150.0, "g"), Ingredient("Milk", 1.0, "1 cup")]

    @pytest.mark.asyncio
    async def test_duplicate_name(self, db):
        await menus.create_menu(db, "Soup", 5.0)
        assert_err(await menus.create_menu(db, "soup", 6.0), ErrorKind.CONFLICT, "name")

    @pytest.mark.asyncio
    async def test_invalid_menu(self, db):
        assert_err(await menus.create_menu(db, "", 5.0), ErrorKind.VALIDATION, "name")
        assert_err(await menus.create_menu(db, "Soup", -1), ErrorKind.VALIDATION, "price")
        assert_err(
            await menus.create_menu(db, "Soup", 5.0, ingredients=[Ingredient("Leek", 1.0, "stone")]),
            ErrorKind.NOT_FOUND,
        )
        assert await menus.list_menus(db) == []

    @pytest.mark.asyncio
    async def test_unstocked_counted_unit_is_rejected(self, db):
        await db.execute(update(MeasurementUnit).where(MeasurementUnit.name == "slice").values(used_in_stock=False))
        await db.commit()

        res = await menus.create_menu(db, "Toast", 3.0, ingredients=[Ingredient("Bread", 2.0, "slice")])

        assert_err(res, ErrorKind.VALIDATION, "ingredients")
        assert await menus.list_menus(db) == []

    @pytest.mark.asyncio
    async def test_unknown_menu(self, db):
        assert_err(await menus.get_menu_ingredients(db, 42), ErrorKind.NOT_FOUND, "menu_id")
