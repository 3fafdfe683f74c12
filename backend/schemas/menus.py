from pydantic import BaseModel, Field
from typing import List, Optional


class IngredientRead(BaseModel):
    stock_name: str
    quantity: float
    unit: str


class MenuRead(BaseModel):
    menu_id: int
    name: str
    description: Optional[str] = None
    price: float
    ingredients: List[IngredientRead] = []


class IngredientInput(BaseModel):
    stock_name: str
    quantity: float = Field(gt=0)
    unit: str


class MenuCreate(BaseModel):
    name: str
    price: float = Field(ge=0)
    description: Optional[str] = None
    ingredients: List[IngredientInput] = []
