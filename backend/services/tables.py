"""
Capacity allocator: hands out the smallest free table able to seat a party.

Allocation is a compare-and-swap on ``tables.is_available``: the candidate is
selected, then flipped with ``UPDATE ... WHERE table_id = ? AND is_available``.
When a concurrent request wins the flip, the next candidate is selected. Each
lost race removes one table from the candidate set, so the loop is bounded by
the number of tables.
"""
import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Ok, Result, conflict, not_found, validation
from db.database import Booking, Table
from . import transactional

logger = logging.getLogger(__name__)


async def _allocate(db: AsyncSession, required_capacity: int) -> Result[Table]:
    if required_capacity is None or required_capacity < 1:
        return validation("You must provide a valid number of clients.", ["clients_nb"])

    while True:
        res = await db.execute(
            select(Table.table_id)
            .where(Table.is_available == True)  # noqa: E712
            .where(Table.can_be_used == True)  # noqa: E712
            .where(Table.capacity >= required_capacity)
            .order_by(Table.capacity.asc(), Table.table_id.asc())
            .limit(1)
        )
        candidate = res.scalar_one_or_none()
        if candidate is None:
            logger.info("No table available for %d clients", required_capacity)
            return conflict(f"No available table found for {required_capacity} clients.", ["clients_nb"])

        flipped = await db.execute(
            update(Table.__table__)
            .where(Table.__table__.c.table_id == candidate)
            .where(Table.__table__.c.is_available == True)  # noqa: E712
            .values(is_available=False)
        )
        if flipped.rowcount == 1:
            table = await db.get(Table, candidate, populate_existing=True)
            logger.info("Allocated table %s (capacity %s) for %d clients", table.table_id, table.capacity, required_capacity)
            return Ok(table)
        logger.debug("Table %s taken concurrently, selecting another one", candidate)


async def _release(db: AsyncSession, table_id: int) -> Result[Table]:
    table = await db.get(Table, table_id)
    if table is None:
        return not_found(f"No table found with the id {table_id}.", ["table_id"])

    res = await db.execute(
        update(Table.__table__)
        .where(Table.__table__.c.table_id == table_id)
        .where(Table.__table__.c.is_available == False)  # noqa: E712
        .values(is_available=True)
    )
    if res.rowcount:
        logger.info("Released table %s", table_id)
    await db.refresh(table)
    return Ok(table)


@transactional
async def allocate(db: AsyncSession, required_capacity: int) -> Result[Table]:
    """Reserve the smallest usable, available table with ``capacity >= required_capacity``."""
    return await _allocate(db, required_capacity)


@transactional
async def release(db: AsyncSession, table_id: int) -> Result[Table]:
    """Make a table available again. Releasing an available table is a no-op."""
    return await _release(db, table_id)


# ---- administration ----------------------------------------------------------

def _check_capacity(capacity) -> Optional[Result]:
    if capacity is None or isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        return validation("You must provide a valid capacity.", ["capacity"])
    return None


@transactional
async def add_table(
    db: AsyncSession,
    capacity: int,
    name: Optional[str] = None,
    is_available: bool = True,
    can_be_used: bool = True,
) -> Result[Table]:
    error = _check_capacity(capacity)
    if error:
        return error
    table = Table(name=(name or "").strip() or None, capacity=capacity, is_available=is_available, can_be_used=can_be_used)
    db.add(table)
    await db.flush()
    return Ok(table)


async def get_table(db: AsyncSession, table_id: int) -> Result[Table]:
    table = await db.get(Table, table_id)
    if table is None:
        return not_found(f"No table found with the id {table_id}.", ["table_id"])
    return Ok(table)


async def list_tables(db: AsyncSession, available_only: bool = False) -> List[Table]:
    stmt = select(Table).order_by(Table.table_id)
    if available_only:
        stmt = stmt.where(Table.is_available == True, Table.can_be_used == True)  # noqa: E712
    res = await db.execute(stmt)
    return list(res.scalars().all())


@transactional
async def update_table(db: AsyncSession, table_id: int, changes: dict) -> Result[Table]:
    """Partial update of name, capacity and usability. Availability belongs to allocate/release."""
    table = await db.get(Table, table_id)
    if table is None:
        return not_found(f"No table found with the id {table_id}.", ["table_id"])

    if "capacity" in changes:
        error = _check_capacity(changes["capacity"])
        if error:
            return error
        table.capacity = changes["capacity"]
    if "name" in changes:
        table.name = (changes["name"] or "").strip() or None
    if "can_be_used" in changes and changes["can_be_used"] is not None:
        table.can_be_used = bool(changes["can_be_used"])

    await db.flush()
    return Ok(table)


@transactional
async def delete_table(db: AsyncSession, table_id: int) -> Result[int]:
    table = await db.get(Table, table_id)
    if table is None:
        return not_found(f"No table found with the id {table_id}.", ["table_id"])
    if not table.is_available:
        return conflict("This table is held by a booking and cannot be deleted.", ["table_id"])
    booked = await db.execute(select(Booking.booking_id).where(Booking.table_id == table_id).limit(1))
    if booked.scalar_one_or_none() is not None:
        return conflict("This table has bookings; mark it as unusable instead.", ["table_id"])
    await db.delete(table)
    await db.flush()
    return Ok(table_id)
