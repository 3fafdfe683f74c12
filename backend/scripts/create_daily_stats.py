"""
Open today's statistics.

Creates today's sales row (zero benefits) and a zero count for every menu if
they are missing, and snapshots the quantity of every stock item. Meant to run
once a day shortly after midnight (cron), so that the week reports have a row
for days without any sale:
  python backend/scripts/create_daily_stats.py
"""

import asyncio
import logging
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.logging_config import configure_logging
from db.database import async_session_maker
from services import sales, statistics

logger = logging.getLogger("create_daily_stats")


async def main() -> int:
    async with async_session_maker() as db:
        sales_res = await sales.ensure_today(db)
        stock_res = await statistics.snapshot_stock(db)
        menus_res = await statistics.ensure_menus_today(db)

    failed = 0
    for what, res in (("sales", sales_res), ("stock", stock_res), ("menu", menus_res)):
        if not res.ok:
            logger.error("Unable to create today's %s statistics: %s", what, res.error.message)
            failed += 1
    if failed:
        return 1

    logger.info("Sales statistics for %s: %s", sales_res.value.day, sales_res.value.benefits)
    logger.info("Stock statistics: %d items, menu statistics: %d menus", len(stock_res.value), len(menus_res.value))
    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(asyncio.run(main()))
