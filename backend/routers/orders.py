from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from core.errors import unwrap
from db.database import get_async_session
from schemas.orders import OrderCreate, OrderMenuRead, OrderRead, OrderUpdate
from services import orders
from services.stock import ShortagePolicy

router = APIRouter()


@router.post("/", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
async def place_order(
    payload: OrderCreate,
    policy: Optional[ShortagePolicy] = None,
    db: AsyncSession = Depends(get_async_session),
):
    order = unwrap(
        await orders.place_order(
            db,
            payload.booking_id,
            payload.user_id,
            payload.additional_infos,
            payload.menus,
            payload.is_take_away,
            policy,
        )
    )
    return OrderRead(**order.to_schema)


@router.get("/", response_model=List[OrderRead])
async def list_orders(
    user_id: Optional[UUID] = None,
    booking_id: Optional[int] = None,
    db: AsyncSession = Depends(get_async_session),
):
    return [OrderRead(**o.to_schema) for o in await orders.list_orders(db, user_id, booking_id)]


@router.get("/user/{user_id}", response_model=List[OrderRead])
async def list_user_orders(user_id: UUID, db: AsyncSession = Depends(get_async_session)):
    return [OrderRead(**o.to_schema) for o in unwrap(await orders.list_user_orders(db, user_id))]


@router.get("/user/{user_id}/menus", response_model=List[OrderMenuRead])
async def list_user_order_menus(user_id: UUID, db: AsyncSession = Depends(get_async_session)):
    entries = unwrap(await orders.list_user_order_menus(db, user_id))
    return [OrderMenuRead(content_id=e.content_id, order_id=e.order_id, menu_id=e.menu_id) for e in entries]


@router.get("/booking/{booking_id}", response_model=List[OrderRead])
async def list_booking_orders(booking_id: int, db: AsyncSession = Depends(get_async_session)):
    return [OrderRead(**o.to_schema) for o in unwrap(await orders.list_booking_orders(db, booking_id))]


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(order_id: int, db: AsyncSession = Depends(get_async_session)):
    order = unwrap(await orders.get_order(db, order_id))
    return OrderRead(**order.to_schema)


@router.patch("/{order_id}", response_model=OrderRead)
async def update_order(order_id: int, payload: OrderUpdate, db: AsyncSession = Depends(get_async_session)):
    order = unwrap(await orders.update_order(db, order_id, payload.model_dump(exclude_unset=True)))
    return OrderRead(**order.to_schema)
