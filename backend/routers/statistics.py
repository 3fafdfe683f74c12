from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from core.converters import today
from core.errors import unwrap
from db.database import get_async_session
from schemas.statistics import (
    BenefitsCreate,
    BenefitsRead,
    MenuStatisticRead,
    SalesStatisticRead,
    StockStatisticRead,
)
from services import sales, statistics

router = APIRouter()
stock_router = APIRouter()
menus_router = APIRouter()


@router.post("/benefits", response_model=BenefitsRead)
async def add_benefits(payload: BenefitsCreate, db: AsyncSession = Depends(get_async_session)):
    total = unwrap(await sales.add_benefits(db, payload.benefits))
    return BenefitsRead(day=today(), benefits=float(total))


@router.post("/today", response_model=SalesStatisticRead)
async def ensure_today(db: AsyncSession = Depends(get_async_session)):
    return SalesStatisticRead(**unwrap(await sales.ensure_today(db)).to_schema)


@router.get("/today", response_model=SalesStatisticRead)
async def get_today(db: AsyncSession = Depends(get_async_session)):
    return SalesStatisticRead(**unwrap(await sales.get_today(db)).to_schema)


@router.get("/week", response_model=List[SalesStatisticRead])
async def get_week(db: AsyncSession = Depends(get_async_session)):
    return [SalesStatisticRead(**s.to_schema) for s in await sales.get_week(db)]


@stock_router.post("/today", response_model=List[StockStatisticRead])
async def snapshot_stock(db: AsyncSession = Depends(get_async_session)):
    return [StockStatisticRead(**s.to_schema) for s in unwrap(await statistics.snapshot_stock(db))]


@stock_router.get("/today", response_model=List[StockStatisticRead])
async def get_stock_today(db: AsyncSession = Depends(get_async_session)):
    return [StockStatisticRead(**s.to_schema) for s in await statistics.get_stock_today(db)]


@stock_router.get("/today/{name}", response_model=StockStatisticRead)
async def get_stock_item_today(name: str, db: AsyncSession = Depends(get_async_session)):
    return StockStatisticRead(**unwrap(await statistics.get_stock_item_today(db, name)).to_schema)


@stock_router.get("/week", response_model=List[StockStatisticRead])
async def get_stock_week(name: Optional[str] = None, db: AsyncSession = Depends(get_async_session)):
    return [StockStatisticRead(**s.to_schema) for s in unwrap(await statistics.get_stock_week(db, name))]


@menus_router.post("/today", response_model=List[MenuStatisticRead])
async def ensure_menus_today(db: AsyncSession = Depends(get_async_session)):
    return [MenuStatisticRead(**s.to_schema) for s in unwrap(await statistics.ensure_menus_today(db))]


@menus_router.get("/today", response_model=List[MenuStatisticRead])
async def get_menus_today(db: AsyncSession = Depends(get_async_session)):
    return [MenuStatisticRead(**s.to_schema) for s in await statistics.get_menus_today(db)]


@menus_router.get("/today/{menu_id}", response_model=MenuStatisticRead)
async def get_menu_today(menu_id: int, db: AsyncSession = Depends(get_async_session)):
    return MenuStatisticRead(**unwrap(await statistics.get_menu_today(db, menu_id)).to_schema)


@menus_router.get("/week", response_model=List[MenuStatisticRead])
async def get_menus_week(menu_id: Optional[int] = None, db: AsyncSession = Depends(get_async_session)):
    return [MenuStatisticRead(**s.to_schema) for s in await statistics.get_menus_week(db, menu_id)]
