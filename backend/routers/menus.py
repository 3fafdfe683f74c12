from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from core.errors import unwrap
from db.database import get_async_session
from schemas.menus import IngredientRead, MenuCreate, MenuRead
from services import menus

router = APIRouter()


@router.get("/", response_model=List[MenuRead])
async def list_menus(db: AsyncSession = Depends(get_async_session)):
    return [MenuRead(**m.to_schema) for m in await menus.list_menus(db)]


@router.post("/", response_model=MenuRead, status_code=status.HTTP_201_CREATED)
async def create_menu(payload: MenuCreate, db: AsyncSession = Depends(get_async_session)):
    ingredients = [menus.Ingredient(i.stock_name, i.quantity, i.unit) for i in payload.ingredients]
    menu = unwrap(await menus.create_menu(db, payload.name, payload.price, payload.description, ingredients))
    return MenuRead(**menu.to_schema)


@router.get("/{menu_id}", response_model=MenuRead)
async def get_menu(menu_id: int, db: AsyncSession = Depends(get_async_session)):
    return MenuRead(**unwrap(await menus.get_menu(db, menu_id)).to_schema)


@router.get("/{menu_id}/ingredients", response_model=List[IngredientRead])
async def get_menu_ingredients(menu_id: int, db: AsyncSession = Depends(get_async_session)):
    items = unwrap(await menus.get_menu_ingredients(db, menu_id))
    return [IngredientRead(stock_name=i.stock_name, quantity=i.quantity, unit=i.unit) for i in items]
