from pydantic import BaseModel
from datetime import date
from typing import Optional


class SalesStatisticRead(BaseModel):
    stat_id: int
    day: date
    benefits: float


class BenefitsCreate(BaseModel):
    benefits: float


class BenefitsRead(BaseModel):
    day: date
    benefits: float


class StockStatisticRead(BaseModel):
    stat_id: int
    stock_id: int
    name: Optional[str] = None
    unit: Optional[str] = None
    day: date
    units: float


class MenuStatisticRead(BaseModel):
    stat_id: int
    menu_id: int
    name: Optional[str] = None
    day: date
    count: int
