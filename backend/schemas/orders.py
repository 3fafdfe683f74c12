from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class OrderRead(BaseModel):
    order_id: int
    booking_id: Optional[int] = None
    user_id: UUID
    additional_infos: Optional[str] = None
    time: Optional[datetime] = None
    total_price: float
    is_take_away: bool
    is_finished: bool
    menu_ids: List[int] = []


class OrderCreate(BaseModel):
    user_id: UUID
    booking_id: Optional[int] = None
    additional_infos: Optional[str] = None
    menus: List[int]
    is_take_away: bool = False


class OrderUpdate(BaseModel):
    total_price: Optional[float] = Field(default=None, ge=0)
    is_finished: Optional[bool] = None


class OrderMenuRead(BaseModel):
    content_id: int
    order_id: int
    menu_id: int
