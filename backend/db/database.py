from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from core.config import settings
from .base import Base

DATABASE_URL = settings.database_url

engine = create_async_engine(DATABASE_URL, echo=settings.database_echo)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


# Models are registered on Base.metadata on import; re-exported for routers and scripts.
from .users import User  # noqa: E402
from .table import Table  # noqa: E402
from .booking import Booking  # noqa: E402
from .measurement import MeasurementUnit, MeasurementType, MeasurementUnitType  # noqa: E402
from .stock import Stock  # noqa: E402
from .menu import Menu, MenuIngredient  # noqa: E402
from .order import Order, OrderMenu  # noqa: E402
from .sales_statistic import SalesStatistic  # noqa: E402
from .stock_statistic import StockStatistic  # noqa: E402
from .menu_statistic import MenuStatistic  # noqa: E402

__all__ = [
    "Base",
    "engine",
    "async_session_maker",
    "create_db_and_tables",
    "get_async_session",
    "User",
    "Table",
    "Booking",
    "MeasurementUnit",
    "MeasurementType",
    "MeasurementUnitType",
    "Stock",
    "Menu",
    "MenuIngredient",
    "Order",
    "OrderMenu",
    "SalesStatistic",
    "StockStatistic",
    "MenuStatistic",
]
