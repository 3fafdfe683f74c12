from pydantic import BaseModel, Field
from typing import Optional


class UnitRead(BaseModel):
    unit_id: int
    name: str
    used_in_stock: bool
    as_ref_unit: Optional[float] = None


class TypeRead(BaseModel):
    type_id: int
    ref_unit_id: Optional[int] = None
    ref_unit: Optional[str] = None
    name: str


class MeasurementRead(BaseModel):
    unit: UnitRead
    type: TypeRead


class ConvertRequest(BaseModel):
    value: float
    from_unit: str = Field(alias="from")
    to_unit: str = Field(alias="to")

    model_config = {"populate_by_name": True}


class ConvertResponse(BaseModel):
    value: float
    unit: str
