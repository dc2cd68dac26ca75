"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - The engine reaches storage only through StorageAdapter
    - Every method accepts a keyword `timeout` (seconds, None = no deadline)
    - Predicates are AND-ed Comparison terms; an empty predicate matches every row
    - "No row matched" is returned as None/False, never raised

Design Decisions:
    - Protocol over ABC (structural subtyping)
    - Column lookup lives on TableDescriptor (built from the adapter's metadata),
      so the pure builders can resolve columns without IO
"""

from typing import Protocol, Sequence

from app.core.domain_types import Record
from app.core.query_types import OrderTerm, Predicate, TableDescriptor


class StorageAdapter(Protocol):
    """Contract for tabular persistence - implemented by shell."""

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
    ) -> list[Record]: ...

    async def count_rows(
        self, table: TableDescriptor, predicate: Predicate,
        *, timeout: float | None = None,
    ) -> int: ...

    async def insert_row(
        self, table: TableDescriptor, values: Record,
        *, timeout: float | None = None,
    ) -> Record: ...

    async def insert_rows(
        self, table: TableDescriptor, rows: Sequence[Record],
        *, timeout: float | None = None,
    ) -> list[Record]: ...

    async def update_row(
        self, table: TableDescriptor, predicate: Predicate, patch: Record,
        *, timeout: float | None = None,
    ) -> Record | None: ...

    async def delete_row(
        self, table: TableDescriptor, predicate: Predicate,
        *, timeout: float | None = None,
    ) -> bool: ...
