"""
Stock ledger: on-hand quantity of every ingredient, each in its own unit.

Quantities never go below zero. Decrements are single conditional UPDATEs so
that concurrent orders cannot both validate against a stale quantity. What
happens on a shortage is the ``ShortagePolicy``: ``CLAMP`` floors the quantity
at zero (the kitchen already used the ingredient, the ledger just lagged),
``REJECT`` fails the operation and with it the whole order.
"""
import enum
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.converters import to_money
from core.errors import Ok, Result, conflict, not_found, validation
from core.units import TYPE_DEFINITIONS
from db.database import MeasurementUnit, Stock
from . import dialect_insert, transactional
from . import measurement

logger = logging.getLogger(__name__)


class ShortagePolicy(str, enum.Enum):
    CLAMP = "clamp"
    REJECT = "reject"


STOCK_SHORTAGE_POLICY = ShortagePolicy(settings.stock_shortage_policy)

STOCK_FIELDS = (
    "name",
    "quantity",
    "unit",
    "unit_price",
    "is_orderable",
    "is_cookable",
    "use_by_date_min",
    "use_by_date_max",
)


async def _find_by_name(db: AsyncSession, name: str) -> Optional[Stock]:
    res = await db.execute(
        select(Stock)
        .where(func.lower(Stock.name) == name.strip().lower())
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def _stock_unit(db: AsyncSession, unit_name: str) -> Result[MeasurementUnit]:
    res = await db.execute(select(MeasurementUnit).where(MeasurementUnit.name == unit_name))
    unit = res.scalar_one_or_none()
    if unit is None:
        return not_found(f'No measurement unit found with the name "{unit_name}".', ["unit"])
    if not unit.used_in_stock:
        return validation(f'The unit "{unit_name}" cannot be used for stock quantities.', ["unit"])
    return Ok(unit)


def _validate_fields(
    quantity=None,
    unit_price=None,
    use_by_date_min: Optional[date] = None,
    use_by_date_max: Optional[date] = None,
) -> Optional[Result]:
    if quantity is not None and (isinstance(quantity, bool) or quantity < 0):
        return validation("You must provide a valid quantity.", ["quantity"])
    if unit_price is not None and unit_price < 0:
        return validation("You must provide a valid unit price.", ["unit_price"])
    if use_by_date_min and use_by_date_max and use_by_date_min > use_by_date_max:
        return validation("The use-by window is inverted.", ["use_by_date_min", "use_by_date_max"])
    return None


@transactional
async def add_or_edit(
    db: AsyncSession,
    name: str,
    quantity: float,
    unit: str,
    unit_price: Optional[float] = None,
    is_orderable: bool = False,
    is_cookable: bool = False,
    use_by_date_min: Optional[date] = None,
    use_by_date_max: Optional[date] = None,
) -> Result[Stock]:
    """Create a stock item, or overwrite the one with the same (case-insensitive) name."""
    name = (name or "").strip()
    if not name:
        return validation("You must provide a valid name.", ["name"])
    error = _validate_fields(quantity, unit_price, use_by_date_min, use_by_date_max)
    if error:
        return error
    if quantity is None:
        return validation("You must provide a valid quantity.", ["quantity"])

    unit_res = await _stock_unit(db, unit)
    if not unit_res.ok:
        return unit_res

    stock = await _find_by_name(db, name)
    if stock is None:
        stock = Stock(name=name)
        db.add(stock)
    stock.quantity = float(quantity)
    stock.unit = unit_res.value
    stock.unit_price = to_money(unit_price) if unit_price is not None else None
    stock.is_orderable = bool(is_orderable)
    stock.is_cookable = bool(is_cookable)
    stock.use_by_date_min = use_by_date_min
    stock.use_by_date_max = use_by_date_max
    await db.flush()
    return Ok(stock)


async def get_stock(db: AsyncSession, name: str) -> Result[Stock]:
    stock = await _find_by_name(db, name or "")
    if stock is None:
        return not_found(f'No stock found with the name "{name}".', ["name"])
    return Ok(stock)


async def list_stocks(
    db: AsyncSession, is_orderable: Optional[bool] = None, is_cookable: Optional[bool] = None
) -> List[Stock]:
    stmt = select(Stock).order_by(func.lower(Stock.name))
    if is_orderable is not None:
        stmt = stmt.where(Stock.is_orderable == is_orderable)
    if is_cookable is not None:
        stmt = stmt.where(Stock.is_cookable == is_cookable)
    res = await db.execute(stmt)
    return list(res.scalars().all())


@transactional
async def update_stock(db: AsyncSession, name: str, changes: dict) -> Result[Stock]:
    """
    Partial update. Changing the unit converts the on-hand quantity into the new
    unit, unless a quantity is supplied alongside it.
    """
    stock = await _find_by_name(db, name or "")
    if stock is None:
        return not_found(f'No stock found with the name "{name}".', ["name"])

    unknown = [k for k in changes if k not in STOCK_FIELDS]
    if unknown:
        return validation("Unknown stock fields.", unknown)

    error = _validate_fields(
        changes.get("quantity"),
        changes.get("unit_price"),
        changes.get("use_by_date_min", stock.use_by_date_min),
        changes.get("use_by_date_max", stock.use_by_date_max),
    )
    if error:
        return error

    if "name" in changes:
        new_name = (changes["name"] or "").strip()
        if not new_name:
            return validation("You must provide a valid name.", ["name"])
        other = await _find_by_name(db, new_name)
        if other is not None and other.stock_id != stock.stock_id:
            return conflict(f'A stock named "{new_name}" already exists.', ["name"])
        stock.name = new_name

    if changes.get("unit") and changes["unit"] != stock.unit.name:
        unit_res = await _stock_unit(db, changes["unit"])
        if not unit_res.ok:
            return unit_res
        if "quantity" not in changes:
            converted = await measurement.convert(db, float(stock.quantity or 0), stock.unit.name, changes["unit"])
            if not converted.ok:
                return converted
            stock.quantity = max(converted.value, 0.0)
        stock.unit = unit_res.value

    if changes.get("quantity") is not None:
        stock.quantity = float(changes["quantity"])
    if "unit_price" in changes:
        stock.unit_price = to_money(changes["unit_price"]) if changes["unit_price"] is not None else None
    for flag in ("is_orderable", "is_cookable"):
        if changes.get(flag) is not None:
            setattr(stock, flag, bool(changes[flag]))
    for field in ("use_by_date_min", "use_by_date_max"):
        if field in changes:
            setattr(stock, field, changes[field])

    await db.flush()
    return Ok(stock)


@transactional
async def delete_stock(db: AsyncSession, name: str) -> Result[str]:
    stock = await _find_by_name(db, name or "")
    if stock is None:
        return not_found(f'No stock found with the name "{name}".', ["name"])
    await db.delete(stock)
    await db.flush()
    return Ok(stock.name)


async def _placeholder_unit(db: AsyncSession, unit_name: str) -> Result[MeasurementUnit]:
    """
    The caller's unit, or its type's reference unit when the caller's unit is a
    kitchen portion. Counted units never convert, so they are always kept.
    """
    m = await measurement.get_by_name(db, unit_name)
    if not m.ok:
        return m
    name = unit_name
    if not m.value.used_in_stock and m.value.is_convertible:
        name = m.value.ref_unit or TYPE_DEFINITIONS.get(m.value.type_name, unit_name)
    res = await db.execute(select(MeasurementUnit).where(MeasurementUnit.name == name))
    return Ok(res.scalar_one())


async def _get_or_create(db: AsyncSession, name: str, unit_name: str) -> Result[Stock]:
    name = (name or "").strip()
    if not name:
        return validation("You must provide a valid name.", ["name"])
    stock = await _find_by_name(db, name)
    if stock is not None:
        return Ok(stock)

    unit_res = await _placeholder_unit(db, unit_name)
    if not unit_res.ok:
        return unit_res

    # A concurrent order may create the same placeholder: insert-or-ignore, then read back.
    tbl = Stock.__table__
    await db.execute(
        dialect_insert(db, tbl)
        .values(name=name, quantity=0.0, unit_id=unit_res.value.unit_id, is_orderable=False, is_cookable=False)
        .on_conflict_do_nothing(index_elements=[func.lower(tbl.c.name)])
    )
    stock = await _find_by_name(db, name)
    logger.info("Created placeholder stock %r in %s", name, unit_res.value.name)
    return Ok(stock)


@transactional
async def get_or_create(db: AsyncSession, name: str, unit_name: str) -> Result[Stock]:
    """
    Return the stock named ``name`` or create it with a zero quantity.

    The placeholder uses ``unit_name`` when it is a stock unit, otherwise the
    reference unit of its type (a "pinch" of salt is stocked in kg).
    """
    return await _get_or_create(db, name, unit_name)


async def _decrement(
    db: AsyncSession, stock_id: int, amount: float, policy: Optional[ShortagePolicy] = None
) -> Result[float]:
    policy = ShortagePolicy(policy or STOCK_SHORTAGE_POLICY)
    if isinstance(amount, bool) or amount is None or amount < 0:
        return validation("You must provide a valid quantity to remove.", ["quantity"])

    tbl = Stock.__table__
    res = await db.execute(
        update(tbl)
        .where(tbl.c.stock_id == stock_id)
        .where(tbl.c.quantity >= amount)
        .values(quantity=tbl.c.quantity - amount)
        .returning(tbl.c.quantity)
    )
    remaining = res.scalar_one_or_none()
    if remaining is not None:
        return Ok(float(remaining))

    current = await db.execute(select(tbl.c.name, tbl.c.quantity).where(tbl.c.stock_id == stock_id))
    row = current.first()
    if row is None:
        return not_found(f"No stock found with the id {stock_id}.", ["stock_id"])

    if policy == ShortagePolicy.REJECT:
        logger.warning("Stock shortage on %r: %s available, %s requested", row.name, row.quantity, amount)
        return conflict(
            f'Not enough "{row.name}" in stock: {row.quantity:g} available, {amount:g} requested.',
            ["quantity"],
        )

    res = await db.execute(
        update(tbl)
        .where(tbl.c.stock_id == stock_id)
        .values(quantity=case((tbl.c.quantity >= amount, tbl.c.quantity - amount), else_=0.0))
        .returning(tbl.c.quantity)
    )
    remaining = res.scalar_one()
    logger.warning("Stock shortage on %r clamped to zero (%s requested)", row.name, amount)
    return Ok(float(remaining))


async def _increment(db: AsyncSession, stock_id: int, amount: float) -> Result[float]:
    if isinstance(amount, bool) or amount is None or amount <= 0:
        return validation("You must provide a valid quantity to add.", ["quantity"])
    tbl = Stock.__table__
    res = await db.execute(
        update(tbl)
        .where(tbl.c.stock_id == stock_id)
        .values(quantity=tbl.c.quantity + amount)
        .returning(tbl.c.quantity)
    )
    remaining = res.scalar_one_or_none()
    if remaining is None:
        return not_found(f"No stock found with the id {stock_id}.", ["stock_id"])
    return Ok(float(remaining))


@transactional
async def decrement(
    db: AsyncSession, name: str, quantity: float, policy: Optional[ShortagePolicy] = None
) -> Result[Stock]:
    """Remove ``quantity`` (in the stock's own unit) from a stock item."""
    stock = await _find_by_name(db, name or "")
    if stock is None:
        return not_found(f'No stock found with the name "{name}".', ["name"])
    res = await _decrement(db, stock.stock_id, quantity, policy)
    if not res.ok:
        return res
    await db.refresh(stock)
    return Ok(stock)


@transactional
async def receive(db: AsyncSession, name: str, quantity: float, unit: str) -> Result[Stock]:
    """Add a delivery of ``quantity`` ``unit`` to a stock item, converted to the stock's unit."""
    stock = await _find_by_name(db, name or "")
    if stock is None:
        return not_found(f'No stock found with the name "{name}".', ["name"])
    converted = await measurement.convert(db, quantity, unit, stock.unit.name)
    if not converted.ok:
        return converted
    res = await _increment(db, stock.stock_id, converted.value)
    if not res.ok:
        return res
    await db.refresh(stock)
    return Ok(stock)

