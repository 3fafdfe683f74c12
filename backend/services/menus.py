"""
Menu catalog: the capability the order processor reads ingredients from.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import to_money
from core.errors import Ok, Result, conflict, not_found, validation
from db.database import Menu, MenuIngredient
from . import measurement, transactional


@dataclass(frozen=True)
class Ingredient:
    stock_name: str
    quantity: float
    unit: str


async def get_menu(db: AsyncSession, menu_id: int) -> Result[Menu]:
    menu = await db.get(Menu, menu_id)
    if menu is None:
        return not_found(f"No menu found with the id {menu_id}.", ["menu_id"])
    return Ok(menu)


async def get_menus(db: AsyncSession, menu_ids: Iterable[int]) -> Result[dict]:
    """Load several menus at once; any unknown id fails the whole lookup."""
    wanted = set(menu_ids)
    res = await db.execute(select(Menu).where(Menu.menu_id.in_(wanted)))
    menus = {m.menu_id: m for m in res.scalars().all()}
    missing = sorted(wanted - set(menus))
    if missing:
        return not_found(f"No menu found with the id(s) {', '.join(map(str, missing))}.", ["menus"])
    return Ok(menus)


async def list_menus(db: AsyncSession) -> List[Menu]:
    res = await db.execute(select(Menu).order_by(Menu.menu_id))
    return list(res.scalars().all())


async def get_menu_ingredients(db: AsyncSession, menu_id: int) -> Result[List[Ingredient]]:
    menu = await get_menu(db, menu_id)
    if not menu.ok:
        return menu
    return Ok([Ingredient(i.stock_name, float(i.quantity), i.unit) for i in menu.value.ingredients])


@transactional
async def create_menu(
    db: AsyncSession,
    name: str,
    price: float,
    description: Optional[str] = None,
    ingredients: Optional[List[Ingredient]] = None,
) -> Result[Menu]:
    name = (name or "").strip()
    if not name:
        return validation("You must provide a valid name.", ["name"])
    if price is None or price < 0:
        return validation("You must provide a valid price.", ["price"])

    existing = await db.execute(select(Menu.menu_id).where(func.lower(Menu.name) == name.lower()))
    if existing.scalar_one_or_none() is not None:
        return conflict(f'A menu named "{name}" already exists.', ["name"])

    ingredients = list(ingredients or [])
    units = {m.name: m for m in await measurement.list_measurements(db)}
    for ing in ingredients:
        if not (ing.stock_name or "").strip() or ing.quantity is None or ing.quantity <= 0:
            return validation("Every ingredient needs a stock name and a positive quantity.", ["ingredients"])
        unit = units.get(ing.unit)
        if unit is None:
            return not_found(f'No measurement unit found with the name "{ing.unit}".', ["ingredients"])
        # A counted unit that is not stocked could never be deducted.
        if not unit.is_convertible and not unit.used_in_stock:
            return validation(f'The unit "{ing.unit}" cannot be deducted from stock.', ["ingredients"])

    menu = Menu(
        name=name,
        description=description,
        price=to_money(price),
        ingredients=[
            MenuIngredient(stock_name=ing.stock_name.strip(), quantity=float(ing.quantity), unit=ing.unit)
            for ing in ingredients
        ],
    )
    db.add(menu)
    await db.flush()
    return Ok(menu)
