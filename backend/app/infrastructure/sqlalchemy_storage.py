"""SQLAlchemy Storage - StorageAdapter implementation over SQLAlchemy Core.

Invariants:
    - Every call opens its own session from the shared pool (reads may run concurrently)
    - Writes are single statements with RETURNING, committed before returning
    - Bulk inserts run in one transaction: all rows or none
    - Bulk results come back in input order
    - Deadlines applied per call via asyncio.wait_for -> StorageTimeoutError
    - ilike terms always carry LIKE_ESCAPE so escaped user input stays literal

Design Decisions:
    - Core statements against Table objects, not ORM queries: engine rows are plain dicts
    - Comparison -> expression dispatch is a flat dict, one entry per operator
    - Bulk with uneven keys falls back to per-row inserts in the same transaction
      (executemany needs one key set)
"""

import asyncio
import logging
import operator
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from sqlalchemy import MetaData, Table, asc, delete, desc, func, insert, select, update
from sqlalchemy.sql.elements import ColumnElement

from app.core.build_predicate import LIKE_ESCAPE
from app.core.domain_types import ComparisonOp, Record, SortDirection
from app.core.errors import StorageTimeoutError, TableRegistrationError
from app.core.query_types import Comparison, OrderTerm, Predicate, TableDescriptor
from app.infrastructure.database import DatabaseSessionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")

_OPERATORS: dict[ComparisonOp, Callable[[Any, Any], ColumnElement[bool]]] = {
    ComparisonOp.EQ: operator.eq,
    ComparisonOp.NE: operator.ne,
    ComparisonOp.LT: operator.lt,
    ComparisonOp.GT: operator.gt,
    ComparisonOp.LTE: operator.le,
    ComparisonOp.GTE: operator.ge,
    ComparisonOp.IN: lambda col, values: col.in_(values),
    ComparisonOp.IS_NULL: lambda col, _: col.is_(None),
    ComparisonOp.IS_NOT_NULL: lambda col, _: col.is_not(None),
    ComparisonOp.ILIKE: lambda col, pattern: col.ilike(pattern, escape=LIKE_ESCAPE),
}


def compile_term(table: Table, term: Comparison) -> ColumnElement[bool]:
    """Compile one predicate term into a SQLAlchemy boolean expression."""
    return _OPERATORS[term.op](table.c[term.column], term.value)


def compile_predicate(table: Table, predicate: Predicate) -> list[ColumnElement[bool]]:
    return [compile_term(table, term) for term in predicate]


def compile_order(table: Table, order: Sequence[OrderTerm]) -> list[Any]:
    return [
        desc(table.c[t.column]) if t.direction is SortDirection.DESC
        else asc(table.c[t.column])
        for t in order
    ]


class SqlAlchemyStorage:
    """Executes query plans built by the core against SQLAlchemy tables."""

    def __init__(self, sessions: DatabaseSessionManager, metadata: MetaData):
        self._sessions = sessions
        self._metadata = metadata

    def _table(self, descriptor: TableDescriptor) -> Table:
        try:
            return self._metadata.tables[descriptor.name]
        except KeyError:
            raise TableRegistrationError(
                descriptor.name, "table is not part of the storage metadata",
            ) from None

    async def _with_deadline(
        self, work: Callable[[], Awaitable[T]], timeout: float | None,
    ) -> T:
        if not timeout:
            return await work()
        try:
            return await asyncio.wait_for(work(), timeout)
        except asyncio.TimeoutError:
            logger.error(f"Storage call timed out after {timeout:g}s")
            raise StorageTimeoutError(timeout) from None

    async def select_rows(
        self,
        table: TableDescriptor,
        predicate: Predicate,
        order: Sequence[OrderTerm],
        projection: Sequence[str] | None,
        limit: int,
        offset: int,
        *,
        timeout: float | None = None,
    ) -> list[Record]:
        sa_table = self._table(table)
        columns = (
            [sa_table.c[name] for name in projection] if projection
            else list(sa_table.c)
        )
        stmt = (
            select(*columns)
            .where(*compile_predicate(sa_table, predicate))
            .order_by(*compile_order(sa_table, order))
            .limit(limit)
            .offset(offset)
        )

        async def work() -> list[Record]:
            async with self._sessions.session() as db:
                result = await db.execute(stmt)
                return [dict(row._mapping) for row in result]

        return await self._with_deadline(work, timeout)

    async def count_rows(
        self, table: TableDescriptor, predicate: Predicate,
        *, timeout: float | None = None,
    ) -> int:
        sa_table = self._table(table)
        stmt = (
            select(func.count())
            .select_from(sa_table)
            .where(*compile_predicate(sa_table, predicate))
        )

        async def work() -> int:
            async with self._sessions.session() as db:
                result = await db.execute(stmt)
                return int(result.scalar_one())

        return await self._with_deadline(work, timeout)

    async def insert_row(
        self, table: TableDescriptor, values: Record,
        *, timeout: float | None = None,
    ) -> Record:
        sa_table = self._table(table)
        stmt = insert(sa_table).values(**values).returning(*sa_table.c)

        async def work() -> Record:
            async with self._sessions.session() as db:
                result = await db.execute(stmt)
                row = dict(result.one()._mapping)
                await db.commit()
                return row

        return await self._with_deadline(work, timeout)

    async def insert_rows(
        self, table: TableDescriptor, rows: Sequence[Record],
        *, timeout: float | None = None,
    ) -> list[Record]:
        sa_table = self._table(table)
        rows = list(rows)
        uniform = len({frozenset(r) for r in rows}) <= 1

        async def work() -> list[Record]:
            async with self._sessions.session() as db:
                if uniform:
                    stmt = insert(sa_table).returning(
                        *sa_table.c, sort_by_parameter_order=True,
                    )
                    result = await db.execute(stmt, rows)
                    inserted = [dict(r._mapping) for r in result.all()]
                else:
                    inserted = []
                    for values in rows:
                        result = await db.execute(
                            insert(sa_table).values(**values).returning(*sa_table.c),
                        )
                        inserted.append(dict(result.one()._mapping))
                await db.commit()
                return inserted

        return await self._with_deadline(work, timeout)

    async def update_row(
        self, table: TableDescriptor, predicate: Predicate, patch: Record,
        *, timeout: float | None = None,
    ) -> Record | None:
        sa_table = self._table(table)
        stmt = (
            update(sa_table)
            .where(*compile_predicate(sa_table, predicate))
            .values(**patch)
            .returning(*sa_table.c)
        )

        async def work() -> Record | None:
            async with self._sessions.session() as db:
                result = await db.execute(stmt)
                row = result.first()
                await db.commit()
                return dict(row._mapping) if row is not None else None

        return await self._with_deadline(work, timeout)

    async def delete_row(
        self, table: TableDescriptor, predicate: Predicate,
        *, timeout: float | None = None,
    ) -> bool:
        sa_table = self._table(table)
        stmt = delete(sa_table).where(*compile_predicate(sa_table, predicate))

        async def work() -> bool:
            async with self._sessions.session() as db:
                result = await db.execute(stmt)
                await db.commit()
                return result.rowcount > 0

        return await self._with_deadline(work, timeout)
