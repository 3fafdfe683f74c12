from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime


class BookingRead(BaseModel):
    booking_id: int
    user_id: UUID
    table_id: int
    time: datetime
    clients_nb: int
    is_client_on_place: bool
    can_client_pay: bool
    is_finished: bool
    is_paid: bool
    state: str


class BookingCreate(BaseModel):
    user_id: UUID
    time: datetime
    clients_nb: int


# Lifecycle flags are optional: only the ones sent are applied
class BookingUpdate(BaseModel):
    time: Optional[datetime] = None
    is_client_on_place: Optional[bool] = None
    can_client_pay: Optional[bool] = None
    is_finished: Optional[bool] = None
    is_paid: Optional[bool] = None
