from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from core.errors import unwrap
from db.database import get_async_session
from schemas.tables import AllocateRequest, TableCreate, TableRead, TableUpdate
from services import tables

router = APIRouter()


@router.get("/", response_model=List[TableRead])
async def list_tables(available_only: bool = False, db: AsyncSession = Depends(get_async_session)):
    return [TableRead(**t.to_schema) for t in await tables.list_tables(db, available_only)]


@router.post("/", response_model=TableRead, status_code=status.HTTP_201_CREATED)
async def create_table(payload: TableCreate, db: AsyncSession = Depends(get_async_session)):
    table = unwrap(
        await tables.add_table(db, payload.capacity, payload.name, payload.is_available, payload.can_be_used)
    )
    return TableRead(**table.to_schema)


@router.post("/allocate", response_model=TableRead)
async def allocate_table(payload: AllocateRequest, db: AsyncSession = Depends(get_async_session)):
    """Hold the smallest free table seating ``clients_nb`` clients"""
    table = unwrap(await tables.allocate(db, payload.clients_nb))
    return TableRead(**table.to_schema)


@router.get("/{table_id}", response_model=TableRead)
async def get_table(table_id: int, db: AsyncSession = Depends(get_async_session)):
    table = unwrap(await tables.get_table(db, table_id))
    return TableRead(**table.to_schema)


@router.patch("/{table_id}", response_model=TableRead)
async def update_table(table_id: int, payload: TableUpdate, db: AsyncSession = Depends(get_async_session)):
    table = unwrap(await tables.update_table(db, table_id, payload.model_dump(exclude_unset=True)))
    return TableRead(**table.to_schema)


@router.post("/{table_id}/release", response_model=TableRead)
async def release_table(table_id: int, db: AsyncSession = Depends(get_async_session)):
    table = unwrap(await tables.release(db, table_id))
    return TableRead(**table.to_schema)


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_table(table_id: int, db: AsyncSession = Depends(get_async_session)):
    unwrap(await tables.delete_table(db, table_id))
