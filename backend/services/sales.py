"""
Daily sales statistics.

Today's row is created lazily. Concurrent payments may both be the first sale
of the day, so adding benefits is one upsert
(``INSERT ... ON CONFLICT (day) DO UPDATE SET benefits = benefits + :x``)
instead of get-or-create followed by an increment.
"""
import logging
from datetime import timedelta
from decimal import Decimal
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import to_money, today
from core.errors import Ok, Result, not_found, validation
from db.database import SalesStatistic
from . import dialect_insert, transactional

logger = logging.getLogger(__name__)

WEEK_DAYS = 7


async def _add_benefits(db: AsyncSession, benefits) -> Result[Decimal]:
    if benefits is None or isinstance(benefits, bool):
        return validation("You must provide a valid benefit.", ["benefits"])
    try:
        amount = to_money(benefits)
    except ArithmeticError:
        return validation("You must provide a valid benefit.", ["benefits"])
    if not amount.is_finite():
        return validation("You must provide a valid benefit.", ["benefits"])

    tbl = SalesStatistic.__table__
    stmt = (
        dialect_insert(db, tbl)
        .values(day=today(), benefits=amount)
        .on_conflict_do_update(index_elements=[tbl.c.day], set_={"benefits": tbl.c.benefits + amount})
        .returning(tbl.c.benefits)
    )
    total = (await db.execute(stmt)).scalar_one()
    logger.info("Added %s to today's benefits (now %s)", amount, total)
    return Ok(to_money(total))


@transactional
async def add_benefits(db: AsyncSession, benefits) -> Result[Decimal]:
    """Add ``benefits`` to today's statistic and return the day's new total."""
    return await _add_benefits(db, benefits)


@transactional
async def ensure_today(db: AsyncSession) -> Result[SalesStatistic]:
    """Create today's row (zero benefits) if it does not exist yet."""
    tbl = SalesStatistic.__table__
    await db.execute(
        dialect_insert(db, tbl)
        .values(day=today(), benefits=Decimal("0.00"))
        .on_conflict_do_nothing(index_elements=[tbl.c.day])
    )
    res = await db.execute(
        select(SalesStatistic).where(SalesStatistic.day == today()).execution_options(populate_existing=True)
    )
    return Ok(res.scalar_one())


async def get_today(db: AsyncSession) -> Result[SalesStatistic]:
    res = await db.execute(
        select(SalesStatistic).where(SalesStatistic.day == today()).execution_options(populate_existing=True)
    )
    stat = res.scalar_one_or_none()
    if stat is None:
        return not_found("No sales statistics available for today.")
    return Ok(stat)


async def get_week(db: AsyncSession) -> List[SalesStatistic]:
    """Statistics of the last seven days, today included."""
    end = today()
    start = end - timedelta(days=WEEK_DAYS - 1)
    res = await db.execute(
        select(SalesStatistic)
        .where(SalesStatistic.day >= start)
        .where(SalesStatistic.day <= end)
        .order_by(SalesStatistic.day.asc())
        .execution_options(populate_existing=True)
    )
    return list(res.scalars().all())
