"""Service test fixtures - a recording in-process StorageAdapter.

Invariants:
    - RecordingStorage satisfies the StorageAdapter protocol without a database
    - Every call is recorded as (method, timeout) for deadline assertions
    - Hooks let a test replace any method's behaviour (errors, slow calls)
"""

import pytest

from app.infrastructure.table_schema import describe_table
from app.models import Person
from app.services.crud_engine import CrudEngine


class RecordingStorage:
    """Minimal StorageAdapter that remembers what the engine asked for."""

    def __init__(self):
        self.calls: list[tuple[str, float | None]] = []
        self.hooks: dict = {}
        self.last_args: dict = {}

    async def _run(self, method, default, timeout, **args):
        self.calls.append((method, timeout))
        self.last_args[method] = args
        hook = self.hooks.get(method)
        if hook is not None:
            return await hook(**args)
        return default

    async def select_rows(self, table, predicate, order, projection, limit, offset, *, timeout=None):
        return await self._run(
            "select_rows", [], timeout, predicate=predicate, order=order,
            projection=projection, limit=limit, offset=offset,
        )

    async def count_rows(self, table, predicate, *, timeout=None):
        return await self._run("count_rows", 0, timeout, predicate=predicate)

    async def insert_row(self, table, values, *, timeout=None):
        return await self._run("insert_row", dict(values), timeout, values=values)

    async def insert_rows(self, table, rows, *, timeout=None):
        return await self._run("insert_rows", [dict(r) for r in rows], timeout, rows=rows)

    async def update_row(self, table, predicate, patch, *, timeout=None):
        return await self._run("update_row", None, timeout, predicate=predicate, patch=patch)

    async def delete_row(self, table, predicate, *, timeout=None):
        return await self._run("delete_row", False, timeout, predicate=predicate)


@pytest.fixture
def recording_storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def fake_engine(recording_storage) -> CrudEngine:
    ids = iter(f"id-{n}" for n in range(1000))
    return CrudEngine(
        describe_table(Person.__table__), "people", recording_storage,
        id_factory=lambda: next(ids), default_timeout=5.0,
    )
