"""Database Session Manager tests - error mapping, rollback, health check."""

import pytest
from sqlalchemy import text

from app.core.errors import DatabaseError
from app.infrastructure.database import DatabaseSessionManager


async def test_health_check_ok(session_manager):
    assert await session_manager.health_check() is True


async def test_sqlalchemy_errors_become_database_error(session_manager):
    with pytest.raises(DatabaseError) as exc_info:
        async with session_manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))
    assert exc_info.value.http_status == 503
    assert exc_info.value.operation == "execute"


async def test_failed_session_leaves_no_partial_write(session_manager):
    with pytest.raises(RuntimeError):
        async with session_manager.session() as db:
            await db.execute(text(
                "INSERT INTO people (id, name, data, created_at) "
                "VALUES ('r1', 'x', '{}', '2024-01-01 00:00:00')"
            ))
            raise RuntimeError("boom")

    async with session_manager.session() as db:
        count = (await db.execute(text("SELECT count(*) FROM people"))).scalar_one()
    assert count == 0


async def test_health_check_false_when_database_unreachable(tmp_path):
    broken = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path}/missing/dir/x.db")
    assert await broken.health_check() is False
    await broken.dispose()
