from datetime import timedelta

from sqlalchemy.sql.expression import Update

from core.converters import utcnow
from core.errors import ErrorKind
from services import tables


def later(hours: int = 2):
    return utcnow() + timedelta(hours=hours)


async def add_tables(db, *capacities):
    ids = []
    for capacity in capacities:
        res = await tables.add_table(db, capacity)
        assert res.ok
        ids.append(res.value.table_id)
    return ids


def assert_err(result, kind: ErrorKind, field=None):
    assert not result.ok, f"expected {kind.value}, got Ok({result.value!r})"
    assert result.error.kind == kind, result.error
    if field is not None:
        assert field in result.error.fields


def interleave_before_write(monkeypatch, session, table, competitor, statement_type=Update):
    """
    Await ``competitor()`` once, right before ``session`` runs its first
    ``statement_type`` statement (UPDATE by default) on ``table``: the competing
    write lands between the caller's read and its conditional write.
    """
    execute = session.execute
    pending = [competitor]

    async def patched(statement, *args, **kwargs):
        if pending and isinstance(statement, statement_type) and statement.table is table:
            await pending.pop()()
        return await execute(statement, *args, **kwargs)

    monkeypatch.setattr(session, "execute", patched)
