from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID

from .bookings import BookingRead
from .orders import OrderRead


class TakeAwayPayment(BaseModel):
    user_id: UUID
    additional_infos: Optional[str] = None
    menus: List[int]


class BookingPayment(BaseModel):
    booking_id: int


class ReceiptRead(BaseModel):
    amount: float
    day_benefits: float
    order: Optional[OrderRead] = None
    booking: Optional[BookingRead] = None
