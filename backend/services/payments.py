"""
Payment finalizer.

Paying a booking is guarded by a compare-and-swap on ``is_finished``: of two
concurrent payments only one flips the flag, the other gets a ``Conflict`` and
records nothing. Releasing the table and adding the day's benefits happen in
the same transaction as the flip.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import to_money
from core.errors import Ok, Result, conflict, not_found
from db.database import Booking, Order
from . import tables, transactional
from .orders import _place_order
from .sales import _add_benefits
from .stock import ShortagePolicy

logger = logging.getLogger(__name__)


@dataclass
class Receipt:
    amount: Decimal
    day_benefits: Decimal
    order: Optional[Order] = None
    booking: Optional[Booking] = None

    @property
    def to_schema(self):
        return {
            "amount": float(self.amount),
            "day_benefits": float(self.day_benefits),
            "order": self.order.to_schema if self.order is not None else None,
            "booking": self.booking.to_schema if self.booking is not None else None,
        }


@transactional
async def pay_take_away(
    db: AsyncSession,
    user_id: UUID,
    notes: Optional[str],
    menu_ids: List[int],
    policy: Optional[ShortagePolicy] = None,
) -> Result[Receipt]:
    """Place a take-away order and cash it in one go."""
    placed = await _place_order(db, None, user_id, notes, menu_ids, True, policy)
    if not placed.ok:
        return placed
    order = placed.value

    total = await _add_benefits(db, order.total_price)
    if not total.ok:
        return total
    logger.info("Take-away order %s paid (%s)", order.order_id, order.total_price)
    return Ok(Receipt(amount=to_money(order.total_price), day_benefits=total.value, order=order))


@transactional
async def pay_booking(db: AsyncSession, booking_id: int) -> Result[Receipt]:
    """Settle every order of a booking, close it and give its table back."""
    booking = await db.get(Booking, booking_id, populate_existing=True)
    if booking is None:
        return not_found(f"No booking found with the id {booking_id}.", ["booking_id"])
    if booking.is_finished or booking.is_paid:
        return conflict("This booking is already paid.", ["booking_id"])

    tbl = Booking.__table__
    flipped = await db.execute(
        update(tbl)
        .where(tbl.c.booking_id == booking_id)
        .where(tbl.c.is_finished == False)  # noqa: E712
        .where(tbl.c.is_paid == False)  # noqa: E712
        .values(is_finished=True, is_paid=True, is_client_on_place=False, can_client_pay=False)
    )
    if flipped.rowcount != 1:
        logger.info("Booking %s was paid concurrently", booking_id)
        return conflict("This booking is already paid.", ["booking_id"])

    released = await tables._release(db, booking.table_id)
    if not released.ok:
        return released

    res = await db.execute(
        select(func.coalesce(func.sum(Order.total_price), 0)).where(Order.booking_id == booking_id)
    )
    amount = to_money(res.scalar_one())
    total = await _add_benefits(db, amount)
    if not total.ok:
        return total

    await db.refresh(booking)
    logger.info("Booking %s paid (%s)", booking_id, amount)
    return Ok(Receipt(amount=amount, day_benefits=total.value, booking=booking))
