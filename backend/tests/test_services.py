from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import sqlite

from db.database import SalesStatistic
from services import UnsupportedDatabaseError, check_dialect, dialect_insert


def bound_to(dialect_name):
    """A stand-in session whose bind reports ``dialect_name``."""
    bind = SimpleNamespace(dialect=SimpleNamespace(name=dialect_name))
    return SimpleNamespace(get_bind=lambda: bind)


class TestDialectInsert:
    @pytest.mark.asyncio
    async def test_sqlite_session_gets_an_upsert_construct(self, db):
        stmt = dialect_insert(db, SalesStatistic.__table__)
        assert isinstance(stmt, sqlite.Insert)

    def test_unsupported_backend_names_the_supported_ones(self):
        with pytest.raises(UnsupportedDatabaseError) as excinfo:
            dialect_insert(bound_to("mysql"), SalesStatistic.__table__)

        message = str(excinfo.value)
        assert '"mysql"' in message
        assert "postgresql" in message and "sqlite" in message
        assert excinfo.value.dialect_name == "mysql"

    def test_startup_check(self):
        check_dialect("postgresql")
        with pytest.raises(UnsupportedDatabaseError):
            check_dialect("oracle")
