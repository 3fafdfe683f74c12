"""
Booking lifecycle.

A booking owns the table the allocator handed out until it becomes terminal
(finished or paid) or is cancelled. The lifecycle is

    reserved -> seated -> pay enabled -> finished/paid

Out-of-order flag updates are refused while ``ENFORCE_BOOKING_TRANSITIONS``
is on, and so is closing a booking: only payment sets ``is_finished`` and
``is_paid``.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.converters import to_naive_utc, utcnow
from core.errors import Ok, Result, conflict, not_found, validation
from db.database import Booking
from . import tables, transactional
from .users import get_user_by_id

logger = logging.getLogger(__name__)

BOOKING_TIME_GRACE = timedelta(seconds=60)
BOOKING_FLAGS = ("is_client_on_place", "can_client_pay", "is_finished", "is_paid")
ENFORCE_BOOKING_TRANSITIONS = settings.enforce_booking_transitions


def _check_time(time: Optional[datetime]) -> Result[datetime]:
    if not isinstance(time, datetime):
        return validation("You must provide a valid booking time.", ["time"])
    time = to_naive_utc(time)
    if time < utcnow() - BOOKING_TIME_GRACE:
        return validation("A booking cannot be made in the past.", ["time"])
    return Ok(time)


async def _get_booking(db: AsyncSession, booking_id: int) -> Result[Booking]:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        return not_found(f"No booking found with the id {booking_id}.", ["booking_id"])
    return Ok(booking)


def is_terminal(booking: Booking) -> bool:
    return bool(booking.is_finished or booking.is_paid)


@transactional
async def create_booking(db: AsyncSession, user_id: UUID, time: datetime, clients_nb: int) -> Result[Booking]:
    """Reserve the smallest table able to seat ``clients_nb`` clients at ``time``."""
    checked = _check_time(time)
    if not checked.ok:
        return checked
    if clients_nb is None or isinstance(clients_nb, bool) or not isinstance(clients_nb, int) or clients_nb < 1:
        return validation("You must provide a valid number of clients.", ["clients_nb"])

    user = await get_user_by_id(db, user_id)
    if not user.ok:
        return user

    table = await tables._allocate(db, clients_nb)
    if not table.ok:
        return table

    booking = Booking(
        user_id=user_id,
        table_id=table.value.table_id,
        time=checked.value,
        clients_nb=clients_nb,
        is_client_on_place=False,
        can_client_pay=False,
        is_finished=False,
        is_paid=False,
        created_at=utcnow(),
    )
    db.add(booking)
    await db.flush()
    logger.info("Booking %s created on table %s for %d clients", booking.booking_id, booking.table_id, clients_nb)
    return Ok(booking)


async def get_booking(db: AsyncSession, booking_id: int) -> Result[Booking]:
    return await _get_booking(db, booking_id)


async def list_bookings(db: AsyncSession, user_id: Optional[UUID] = None) -> List[Booking]:
    stmt = select(Booking).order_by(Booking.time.asc(), Booking.booking_id.asc())
    if user_id is not None:
        stmt = stmt.where(Booking.user_id == user_id)
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_user_bookings(db: AsyncSession, user_id: UUID) -> Result[List[Booking]]:
    user = await get_user_by_id(db, user_id)
    if not user.ok:
        return user
    return Ok(await list_bookings(db, user_id))


def _check_transition(booking: Booking, flags: dict) -> Optional[Result]:
    if is_terminal(booking):
        return conflict("This booking is already finished.", ["booking_id"])
    closing = [f for f in ("is_finished", "is_paid") if flags.get(f)]
    if closing:
        return conflict("A booking is closed by paying it, use the payment endpoint.", closing)
    seated = flags.get("is_client_on_place", booking.is_client_on_place)
    if flags.get("can_client_pay") and not seated:
        return conflict("The clients must be seated before they can pay.", ["can_client_pay"])
    return None


@transactional
async def update_booking(db: AsyncSession, booking_id: int, changes: dict) -> Result[Booking]:
    """
    Partial update of the booking time and lifecycle flags.

    When the update makes the booking terminal (only possible with transitions
    unenforced) its table is released in the same transaction.
    """
    found = await _get_booking(db, booking_id)
    if not found.ok:
        return found
    booking = found.value

    unknown = [k for k in changes if k != "time" and k not in BOOKING_FLAGS]
    if unknown:
        return validation("Unknown booking fields.", unknown)

    flags = {k: bool(changes[k]) for k in BOOKING_FLAGS if changes.get(k) is not None}
    if ENFORCE_BOOKING_TRANSITIONS:
        error = _check_transition(booking, flags)
        if error:
            return error

    if changes.get("time") is not None:
        checked = _check_time(changes["time"])
        if not checked.ok:
            return checked
        booking.time = checked.value

    was_terminal = is_terminal(booking)
    for flag, value in flags.items():
        setattr(booking, flag, value)
    await db.flush()

    if is_terminal(booking) and not was_terminal:
        released = await tables._release(db, booking.table_id)
        if not released.ok:
            return released
        logger.info("Booking %s is %s", booking.booking_id, booking.state)
    return Ok(booking)


@transactional
async def cancel_booking(db: AsyncSession, booking_id: int) -> Result[int]:
    """Delete a booking, giving its table back unless payment already did."""
    found = await _get_booking(db, booking_id)
    if not found.ok:
        return found
    booking = found.value

    if not is_terminal(booking):
        released = await tables._release(db, booking.table_id)
        if not released.ok:
            return released

    await db.delete(booking)
    await db.flush()
    logger.info("Booking %s cancelled", booking_id)
    return Ok(booking_id)
