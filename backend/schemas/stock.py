from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date


class StockRead(BaseModel):
    stock_id: int
    name: str
    quantity: float
    unit: Optional[str] = None
    unit_price: Optional[float] = None
    is_orderable: bool
    is_cookable: bool
    use_by_date_min: Optional[date] = None
    use_by_date_max: Optional[date] = None


class StockCreate(BaseModel):
    name: str
    quantity: float = Field(ge=0)
    unit: str
    unit_price: Optional[float] = Field(default=None, ge=0)
    is_orderable: bool = False
    is_cookable: bool = False
    use_by_date_min: Optional[date] = None
    use_by_date_max: Optional[date] = None

    @field_validator("name", "unit")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class StockUpdate(BaseModel):
    name: Optional[str] = None
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    unit_price: Optional[float] = Field(default=None, ge=0)
    is_orderable: Optional[bool] = None
    is_cookable: Optional[bool] = None
    use_by_date_min: Optional[date] = None
    use_by_date_max: Optional[date] = None


class StockReceive(BaseModel):
    """A delivery, in any unit of the stock item's measurement type"""
    quantity: float = Field(gt=0)
    unit: str


class StockConsume(BaseModel):
    """Quantity to remove, in the stock item's own unit"""
    quantity: float = Field(gt=0)


class PlaceholderRequest(BaseModel):
    name: str
    unit: str
