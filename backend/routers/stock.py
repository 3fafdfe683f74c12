from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from core.errors import unwrap
from db.database import get_async_session
from schemas.stock import PlaceholderRequest, StockConsume, StockCreate, StockRead, StockReceive, StockUpdate
from services import stock
from services.stock import ShortagePolicy

router = APIRouter()


@router.get("/", response_model=List[StockRead])
async def list_stocks(
    is_orderable: Optional[bool] = None,
    is_cookable: Optional[bool] = None,
    db: AsyncSession = Depends(get_async_session),
):
    return [StockRead(**s.to_schema) for s in await stock.list_stocks(db, is_orderable, is_cookable)]


@router.post("/", response_model=StockRead)
async def add_or_edit_stock(payload: StockCreate, db: AsyncSession = Depends(get_async_session)):
    """Create a stock item, or overwrite the one with the same name"""
    item = unwrap(
        await stock.add_or_edit(
            db,
            payload.name,
            payload.quantity,
            payload.unit,
            payload.unit_price,
            payload.is_orderable,
            payload.is_cookable,
            payload.use_by_date_min,
            payload.use_by_date_max,
        )
    )
    return StockRead(**item.to_schema)


@router.post("/placeholder", response_model=StockRead)
async def get_or_create_stock(payload: PlaceholderRequest, db: AsyncSession = Depends(get_async_session)):
    item = unwrap(await stock.get_or_create(db, payload.name, payload.unit))
    return StockRead(**item.to_schema)


@router.get("/{name}", response_model=StockRead)
async def get_stock(name: str, db: AsyncSession = Depends(get_async_session)):
    item = unwrap(await stock.get_stock(db, name))
    return StockRead(**item.to_schema)


@router.patch("/{name}", response_model=StockRead)
async def update_stock(name: str, payload: StockUpdate, db: AsyncSession = Depends(get_async_session)):
    item = unwrap(await stock.update_stock(db, name, payload.model_dump(exclude_unset=True)))
    return StockRead(**item.to_schema)


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stock(name: str, db: AsyncSession = Depends(get_async_session)):
    unwrap(await stock.delete_stock(db, name))


@router.post("/{name}/receive", response_model=StockRead)
async def receive_stock(name: str, payload: StockReceive, db: AsyncSession = Depends(get_async_session)):
    item = unwrap(await stock.receive(db, name, payload.quantity, payload.unit))
    return StockRead(**item.to_schema)


@router.post("/{name}/consume", response_model=StockRead)
async def consume_stock(
    name: str,
    payload: StockConsume,
    policy: Optional[ShortagePolicy] = None,
    db: AsyncSession = Depends(get_async_session),
):
    item = unwrap(await stock.decrement(db, name, payload.quantity, policy))
    return StockRead(**item.to_schema)
