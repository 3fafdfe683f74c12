from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from core.errors import unwrap
from db.database import get_async_session
from schemas.payments import ReceiptRead, TakeAwayPayment
from services import payments
from services.stock import ShortagePolicy

router = APIRouter()


@router.post("/takeaway", response_model=ReceiptRead)
async def pay_take_away(
    payload: TakeAwayPayment,
    policy: Optional[ShortagePolicy] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """Order and pay for take-away menus in one step"""
    receipt = unwrap(
        await payments.pay_take_away(db, payload.user_id, payload.additional_infos, payload.menus, policy)
    )
    return ReceiptRead(**receipt.to_schema)


@router.post("/booking/{booking_id}", response_model=ReceiptRead)
async def pay_booking(booking_id: int, db: AsyncSession = Depends(get_async_session)):
    """Pay every order of a booking and free its table"""
    receipt = unwrap(await payments.pay_booking(db, booking_id))
    return ReceiptRead(**receipt.to_schema)
