"""
Domain services.

Public operations own their transaction: they commit when they return ``Ok``
and roll back when they return ``Err``. Underscore-prefixed helpers never
commit, so composite operations (placing an order, paying a booking) chain
them inside a single transaction.
"""
import functools
import logging

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Err, internal

logger = logging.getLogger(__name__)


def transactional(fn):
    @functools.wraps(fn)
    async def wrapper(db: AsyncSession, *args, **kwargs):
        try:
            result = await fn(db, *args, **kwargs)
        except SQLAlchemyError:
            logger.exception("%s failed", fn.__name__)
            await db.rollback()
            return internal(f"Unable to complete {fn.__name__.replace('_', ' ')}")
        if isinstance(result, Err):
            await db.rollback()
        else:
            await db.commit()
        return result

    return wrapper


UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


class UnsupportedDatabaseError(RuntimeError):
    """The configured database has no INSERT ... ON CONFLICT support."""

    def __init__(self, dialect_name: str):
        supported = ", ".join(sorted(UPSERT_DIALECTS))
        super().__init__(
            f"The database dialect \"{dialect_name}\" is not supported: point DATABASE_URL at one of {supported}."
        )
        self.dialect_name = dialect_name


def check_dialect(dialect_name: str) -> None:
    if dialect_name not in UPSERT_DIALECTS:
        raise UnsupportedDatabaseError(dialect_name)


def dialect_insert(db: AsyncSession, table):
    """INSERT construct supporting ``on_conflict_*`` for the session's backend."""
    name = db.get_bind().dialect.name
    check_dialect(name)
    return UPSERT_DIALECTS[name](table)
