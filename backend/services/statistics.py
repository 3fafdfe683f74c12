"""
Daily stock and menu statistics.

``stock_statistics`` holds one snapshot of every stock item's quantity per day,
taken by the daily job (or on demand). ``menu_statistics`` counts how many
times each menu was ordered per day; the count is bumped by the order
processor inside the order's own transaction, so a rolled back order is never
counted. Both tables are written with upserts keyed on (item, day).
"""
import logging
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import today
from core.errors import Ok, Result, not_found
from db.database import Menu, MenuStatistic, Stock, StockStatistic
from . import dialect_insert, transactional
from .sales import WEEK_DAYS
from .stock import _find_by_name

logger = logging.getLogger(__name__)


def _week() -> Tuple[date, date]:
    end = today()
    return end - timedelta(days=WEEK_DAYS - 1), end


# Stock levels


async def _record_stock_levels(db: AsyncSession) -> int:
    stock = Stock.__table__
    rows = (await db.execute(select(stock.c.stock_id, stock.c.quantity).order_by(stock.c.stock_id))).all()
    if not rows:
        return 0

    day = today()
    tbl = StockStatistic.__table__
    stmt = dialect_insert(db, tbl).values(
        [{"stock_id": row.stock_id, "day": day, "units": float(row.quantity or 0)} for row in rows]
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[tbl.c.stock_id, tbl.c.day],
        set_={"units": stmt.excluded.units},
    )
    await db.execute(stmt)
    return len(rows)


async def _stock_stats(db: AsyncSession, start: date, end: date, stock_id: Optional[int] = None):
    stmt = (
        select(StockStatistic)
        .where(StockStatistic.day >= start)
        .where(StockStatistic.day <= end)
        .order_by(StockStatistic.day.asc(), StockStatistic.stock_id.asc())
        .execution_options(populate_existing=True)
    )
    if stock_id is not None:
        stmt = stmt.where(StockStatistic.stock_id == stock_id)
    res = await db.execute(stmt)
    return list(res.scalars().all())


@transactional
async def snapshot_stock(db: AsyncSession) -> Result[List[StockStatistic]]:
    """Record the current quantity of every stock item as today's value, overwriting an earlier snapshot."""
    recorded = await _record_stock_levels(db)
    logger.info("Recorded today's level of %d stock items", recorded)
    return Ok(await _stock_stats(db, today(), today()))


async def get_stock_today(db: AsyncSession) -> List[StockStatistic]:
    return await _stock_stats(db, today(), today())


async def _stock_id(db: AsyncSession, name: str) -> Result[int]:
    item = await _find_by_name(db, name or "")
    if item is None:
        return not_found(f'No stock found with the name "{name}".', ["name"])
    return Ok(item.stock_id)


async def get_stock_item_today(db: AsyncSession, name: str) -> Result[StockStatistic]:
    stock_id = await _stock_id(db, name)
    if not stock_id.ok:
        return stock_id
    stats = await _stock_stats(db, today(), today(), stock_id.value)
    if not stats:
        return not_found(f'No statistics recorded today for "{name}".', ["name"])
    return Ok(stats[0])


async def get_stock_week(db: AsyncSession, name: Optional[str] = None) -> Result[List[StockStatistic]]:
    """Snapshots of the last seven days, today included, optionally for one item."""
    stock_id = None
    if name is not None:
        found = await _stock_id(db, name)
        if not found.ok:
            return found
        stock_id = found.value
    start, end = _week()
    return Ok(await _stock_stats(db, start, end, stock_id))


# Menu popularity


async def _count_menus(db: AsyncSession, menu_ids: Iterable[int]) -> None:
    counts = Counter(menu_ids)
    if not counts:
        return
    day = today()
    tbl = MenuStatistic.__table__
    stmt = dialect_insert(db, tbl).values(
        [{"menu_id": menu_id, "day": day, "count": n} for menu_id, n in sorted(counts.items())]
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[tbl.c.menu_id, tbl.c.day],
        set_={"count": tbl.c["count"] + stmt.excluded["count"]},
    )
    await db.execute(stmt)


async def _menu_stats(db: AsyncSession, start: date, end: date, menu_id: Optional[int] = None):
    stmt = (
        select(MenuStatistic)
        .where(MenuStatistic.day >= start)
        .where(MenuStatistic.day <= end)
        .order_by(MenuStatistic.day.asc(), MenuStatistic.menu_id.asc())
        .execution_options(populate_existing=True)
    )
    if menu_id is not None:
        stmt = stmt.where(MenuStatistic.menu_id == menu_id)
    res = await db.execute(stmt)
    return list(res.scalars().all())


@transactional
async def ensure_menus_today(db: AsyncSession) -> Result[List[MenuStatistic]]:
    """Create a zero row for every menu not ordered yet today."""
    menu_ids = (await db.execute(select(Menu.menu_id).order_by(Menu.menu_id))).scalars().all()
    if menu_ids:
        tbl = MenuStatistic.__table__
        day = today()
        await db.execute(
            dialect_insert(db, tbl)
            .values([{"menu_id": menu_id, "day": day, "count": 0} for menu_id in menu_ids])
            .on_conflict_do_nothing(index_elements=[tbl.c.menu_id, tbl.c.day])
        )
    return Ok(await _menu_stats(db, today(), today()))


async def get_menus_today(db: AsyncSession) -> List[MenuStatistic]:
    return await _menu_stats(db, today(), today())


async def get_menu_today(db: AsyncSession, menu_id: int) -> Result[MenuStatistic]:
    stats = await _menu_stats(db, today(), today(), menu_id)
    if not stats:
        return not_found(f"No statistics recorded today for the menu {menu_id}.", ["menu_id"])
    return Ok(stats[0])


async def get_menus_week(db: AsyncSession, menu_id: Optional[int] = None) -> List[MenuStatistic]:
    """Counts of the last seven days, today included."""
    start, end = _week()
    return await _menu_stats(db, start, end, menu_id)
