"""
Order processor.

Placing an order writes the order, one ``orders_menus`` row per menu entry,
every stock decrement its ingredients imply and today's menu counts, in a
single transaction. The ingredient quantities are summed per stock item first
and the items are decremented in ``stock_id`` order, so two orders touching
the same items lock them in the same sequence.
"""
import logging
from collections import Counter, defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import to_money, utcnow
from core.errors import Err, Ok, Result, ServiceError, not_found, conflict, validation
from db.database import Booking, Order, OrderMenu
from . import measurement, menus, statistics, stock, transactional
from .bookings import is_terminal
from .stock import ShortagePolicy
from .users import get_user_by_id

logger = logging.getLogger(__name__)

NOTES_MAX_LENGTH = 1000


async def _create_order(
    db: AsyncSession,
    booking_id: Optional[int],
    user_id: UUID,
    notes: Optional[str],
    menu_ids: List[int],
    is_take_away: bool = False,
) -> Result[Order]:
    if notes is not None and len(notes) > NOTES_MAX_LENGTH:
        return validation(
            f"Additional infos cannot be longer than {NOTES_MAX_LENGTH} characters.", ["additional_infos"]
        )
    menu_ids = list(menu_ids or [])
    if not menu_ids:
        return validation("An order must contain at least one menu.", ["menus"])

    user = await get_user_by_id(db, user_id)
    if not user.ok:
        return user

    if booking_id is not None:
        booking = await db.get(Booking, booking_id)
        if booking is None:
            return not_found(f"No booking found with the id {booking_id}.", ["booking_id"])
        if is_terminal(booking):
            return conflict("This booking is already finished.", ["booking_id"])
    else:
        is_take_away = True

    found = await menus.get_menus(db, menu_ids)
    if not found.ok:
        return found
    catalog = found.value

    total = sum((to_money(catalog[menu_id].price) for menu_id in menu_ids), Decimal("0.00"))
    order = Order(
        booking_id=booking_id,
        user_id=user_id,
        additional_infos=notes,
        time=utcnow(),
        total_price=total,
        is_take_away=bool(is_take_away),
        is_finished=False,
        menus=[OrderMenu(menu_id=menu_id) for menu_id in menu_ids],
    )
    db.add(order)
    await db.flush()
    return Ok(order)


def _keep_kind(error: ServiceError, context: str) -> Err:
    return Err(ServiceError(error.kind, f"{context}: {error.message}", error.fields))


async def _consume_ingredients(
    db: AsyncSession, menu_ids: List[int], policy: Optional[ShortagePolicy] = None
) -> Result[Dict[int, float]]:
    """Decrement the stock used by ``menu_ids``; returns the quantity left per stock item."""
    needed: Dict[Tuple[str, str], float] = defaultdict(float)
    for menu_id, count in Counter(menu_ids).items():
        ingredients = await menus.get_menu_ingredients(db, menu_id)
        if not ingredients.ok:
            return ingredients
        for ing in ingredients.value:
            needed[(ing.stock_name, ing.unit)] += ing.quantity * count

    per_stock: Dict[int, float] = defaultdict(float)
    for (stock_name, unit), quantity in needed.items():
        item = await stock._get_or_create(db, stock_name, unit)
        if not item.ok:
            return _keep_kind(item.error, f'Unable to resolve stock "{stock_name}"')
        converted = await measurement.convert(db, quantity, unit, item.value.unit.name)
        if not converted.ok:
            return _keep_kind(converted.error, f'Unable to use "{stock_name}"')
        per_stock[item.value.stock_id] += converted.value

    remaining: Dict[int, float] = {}
    for stock_id in sorted(per_stock):
        left = await stock._decrement(db, stock_id, per_stock[stock_id], policy)
        if not left.ok:
            return left
        remaining[stock_id] = left.value
    return Ok(remaining)


async def _place_order(
    db: AsyncSession,
    booking_id: Optional[int],
    user_id: UUID,
    notes: Optional[str],
    menu_ids: List[int],
    is_take_away: bool = False,
    policy: Optional[ShortagePolicy] = None,
) -> Result[Order]:
    created = await _create_order(db, booking_id, user_id, notes, menu_ids, is_take_away)
    if not created.ok:
        return created
    consumed = await _consume_ingredients(db, menu_ids, policy)
    if not consumed.ok:
        return consumed
    await statistics._count_menus(db, menu_ids)
    order = created.value
    logger.info("Order %s placed (%d menus, total %s)", order.order_id, len(menu_ids), order.total_price)
    return Ok(order)


@transactional
async def place_order(
    db: AsyncSession,
    booking_id: Optional[int],
    user_id: UUID,
    notes: Optional[str],
    menu_ids: List[int],
    is_take_away: bool = False,
    policy: Optional[ShortagePolicy] = None,
) -> Result[Order]:
    """
    Record an order and consume the stock of its menus.

    An order without a booking is always a take-away. Any failure (unknown
    menu, incompatible ingredient unit, shortage under ``REJECT``) rolls back
    the order and every decrement already applied.
    """
    return await _place_order(db, booking_id, user_id, notes, menu_ids, is_take_away, policy)


async def get_order(db: AsyncSession, order_id: int) -> Result[Order]:
    order = await db.get(Order, order_id)
    if order is None:
        return not_found(f"No order found with the id {order_id}.", ["order_id"])
    return Ok(order)


async def list_orders(
    db: AsyncSession, user_id: Optional[UUID] = None, booking_id: Optional[int] = None
) -> List[Order]:
    stmt = select(Order).order_by(Order.time.asc(), Order.order_id.asc())
    if user_id is not None:
        stmt = stmt.where(Order.user_id == user_id)
    if booking_id is not None:
        stmt = stmt.where(Order.booking_id == booking_id)
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_user_orders(db: AsyncSession, user_id: UUID) -> Result[List[Order]]:
    user = await get_user_by_id(db, user_id)
    if not user.ok:
        return user
    return Ok(await list_orders(db, user_id=user_id))


async def list_booking_orders(db: AsyncSession, booking_id: int) -> Result[List[Order]]:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        return not_found(f"No booking found with the id {booking_id}.", ["booking_id"])
    return Ok(await list_orders(db, booking_id=booking_id))


async def list_user_order_menus(db: AsyncSession, user_id: UUID) -> Result[List[OrderMenu]]:
    """Every menu entry ordered by a user, oldest order first."""
    user = await get_user_by_id(db, user_id)
    if not user.ok:
        return user
    res = await db.execute(
        select(OrderMenu)
        .join(Order, Order.order_id == OrderMenu.order_id)
        .where(Order.user_id == user_id)
        .order_by(Order.time.asc(), OrderMenu.content_id.asc())
    )
    return Ok(list(res.scalars().all()))


@transactional
async def update_order(db: AsyncSession, order_id: int, changes: dict) -> Result[Order]:
    """Correct the total price or mark an order as served."""
    order = await db.get(Order, order_id)
    if order is None:
        return not_found(f"No order found with the id {order_id}.", ["order_id"])

    unknown = [k for k in changes if k not in ("total_price", "is_finished")]
    if unknown:
        return validation("Only total_price and is_finished can be changed.", unknown)

    if changes.get("total_price") is not None:
        price = changes["total_price"]
        if isinstance(price, bool) or price < 0:
            return validation("You must provide a valid total price.", ["total_price"])
        order.total_price = to_money(price)
    if changes.get("is_finished") is not None:
        order.is_finished = bool(changes["is_finished"])

    await db.flush()
    return Ok(order)
