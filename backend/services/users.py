from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Ok, Result, not_found
from db.database import User
from db.users import get_user_db


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Result[User]:
    """User directory lookup; users themselves are managed elsewhere."""
    user = await get_user_db(db).get(user_id)
    if user is None:
        return not_found(f"No user found with the id {user_id}.", ["user_id"])
    return Ok(user)
