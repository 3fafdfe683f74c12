from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from core.errors import unwrap
from db.database import get_async_session
from schemas.users import UserRead
from services.users import get_user_by_id

router = APIRouter()

# Accounts are created and authenticated elsewhere; this router only reads the directory.


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_async_session)):
    return UserRead(**unwrap(await get_user_by_id(db, user_id)).to_schema)
