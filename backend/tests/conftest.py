"""Root conftest - shared database, storage and registry fixtures.

Invariants:
    - Every test gets a fresh SQLite file under tmp_path (never a shared test.db)
    - Tables come from Base.metadata, the same metadata the storage adapter uses
    - The registry is built exactly as the lifespan builds it (build_registry)

Design Decisions:
    - File-backed SQLite instead of :memory: - List runs its page read and count on two
      sessions at once, and every aiosqlite connection to :memory: is a new database
    - DatabaseSessionManager built via __new__ so tests bind it to their own engine
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("ENVIRONMENT", "development")

from app.db.base import Base  # noqa: E402
from app.infrastructure.database import DatabaseSessionManager  # noqa: E402
from app.infrastructure.sqlalchemy_storage import SqlAlchemyStorage  # noqa: E402
from app.models import REGISTERED_MODELS, Person  # noqa: E402
from app.services.engine_registry import build_registry  # noqa: E402

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'records.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_manager(test_engine) -> DatabaseSessionManager:
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    return manager


@pytest.fixture
def storage(session_manager) -> SqlAlchemyStorage:
    return SqlAlchemyStorage(session_manager, Base.metadata)


@pytest.fixture
def registry(storage):
    return build_registry(storage, REGISTERED_MODELS)


@pytest.fixture
def people(registry):
    return registry.get("people")


@pytest.fixture
def seed_people(test_engine):
    """Insert people rows directly; row i gets created_at = BASE_TIME + i minutes.

    Returns the inserted ids in insertion order.
    """

    async def seed(rows: list[dict]) -> list[str]:
        values = []
        for i, row in enumerate(rows):
            values.append({
                "id": row.get("id", f"p{i:03d}"),
                "name": row.get("name", f"person {i}"),
                "data": row.get("data", {}),
                "created_at": row.get("created_at", BASE_TIME + timedelta(minutes=i)),
                "deleted_at": row.get("deleted_at"),
                "age": row.get("age"),
                "email": row.get("email"),
            })
        async with test_engine.begin() as conn:
            await conn.execute(insert(Person.__table__), values)
        return [v["id"] for v in values]

    return seed
