from pydantic import BaseModel, Field
from typing import Optional


class TableRead(BaseModel):
    table_id: int
    name: Optional[str] = None
    capacity: int
    is_available: bool
    can_be_used: bool


class TableCreate(BaseModel):
    capacity: int = Field(ge=1)
    name: Optional[str] = None
    is_available: bool = True
    can_be_used: bool = True


class TableUpdate(BaseModel):
    name: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    can_be_used: Optional[bool] = None


class AllocateRequest(BaseModel):
    clients_nb: int
