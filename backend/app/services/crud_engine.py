"""CRUD Engine - runs list/get/create/update/delete/restore against one registered table.

Invariants:
    - Query plans come only from the pure core builders (parse -> predicate/order/projection)
    - List and Count share one predicate; List's page read and count run concurrently
      and are NOT a single snapshot (total may drift under concurrent writes)
    - Update and SoftDelete never match soft-deleted rows; Restore only matches them;
      HardDelete matches either
    - Callers can never write wid, id or created_at; deleted_at is writable through
      Update only (Create and BulkCreate drop it); unknown keys are dropped
    - Timestamp strings in written values are parsed; unparsable ones raise FieldValueError
    - If one of List's concurrent reads fails, the other is cancelled and awaited
    - "Not found" is None/False, never an exception
    - Storage failures propagate unchanged after being logged with model + operation
    - Every operation forwards a timeout (per-call, else the engine default) to storage

Design Decisions:
    - One engine per model, shared by all requests; no per-request state
    - id_factory injected so tests can pin identifiers
    - Updates with nothing writable read the live record instead of issuing an empty UPDATE
"""

import asyncio
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterator, Mapping, Sequence

from app.core.build_order import build_order, build_projection
from app.core.build_predicate import build_predicate, identity_predicate, parse_timestamp
from app.core.domain_types import ColumnKind, Operation, Record, RecordId
from app.core.errors import FieldValueError, RecordStoreError
from app.core.paginate import Pagination, resolve_page_window, wants_deleted
from app.core.parse_filters import parse_filters
from app.core.query_types import Predicate, QueryPlan, TableDescriptor
from app.core.repository_protocols import StorageAdapter

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def generate_record_id() -> RecordId:
    return RecordId(uuid.uuid4().hex)


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """asyncio.gather that cancels and reaps the siblings when one awaitable fails."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


@dataclass
class ListResult:
    """One page of records plus its pagination envelope."""
    data: list[Record]
    pagination: Pagination

    def to_dict(self) -> dict:
        return {"data": self.data, "pagination": self.pagination.to_dict()}


class CrudEngine:
    """Query-translation engine bound to one table."""

    def __init__(
        self,
        table: TableDescriptor,
        model_name: str,
        storage: StorageAdapter,
        id_factory: Callable[[], str] = generate_record_id,
        default_timeout: float | None = None,
    ):
        self.table = table
        self.model_name = model_name
        self._storage = storage
        self._id_factory = id_factory
        self._default_timeout = default_timeout

    # ─── Plan building (pure) ───────────────────────────────────

    def build_filter_predicate(self, params: Mapping[str, Any]) -> Predicate:
        return build_predicate(
            parse_filters(params), self.table, include_deleted=wants_deleted(params),
        )

    def build_plan(self, params: Mapping[str, Any]) -> QueryPlan:
        _, limit, offset = resolve_page_window(params)
        return QueryPlan(
            predicate=self.build_filter_predicate(params),
            order=build_order(params.get("sort"), self.table),
            projection=build_projection(params.get("select"), self.table),
            limit=limit,
            offset=offset,
        )

    def writable_values(
        self, values: Mapping[str, Any], blocked: frozenset[str] | None = None,
    ) -> Record:
        """Drop blocked and unknown columns from caller input; parse timestamp strings.

        blocked defaults to the insert-protected set (immutables plus deleted_at).
        """
        if blocked is None:
            blocked = self.table.standard.insert_protected()
        kept = {
            k: self._storable(k, v) for k, v in values.items()
            if k not in blocked and self.table.resolve_column(k) is not None
        }
        dropped = sorted(set(values) - set(kept))
        if dropped:
            logger.debug(
                f"Ignoring non-writable fields for {self.model_name}: {dropped}",
                extra={"model_name": self.model_name},
            )
        return kept

    # ─── Helpers ────────────────────────────────────────────────

    def _storable(self, column: str, value: Any) -> Any:
        if value is None or self.table.resolve_column(column).kind is not ColumnKind.TIMESTAMP:
            return value
        try:
            return parse_timestamp(value)
        except (TypeError, ValueError):
            raise FieldValueError(column, value, "expected an ISO-8601 timestamp") from None

    def _timeout(self, timeout: float | None) -> float | None:
        return self._default_timeout if timeout is _UNSET else timeout

    @contextmanager
    def _operation(self, operation: Operation, record_id: str | None = None) -> Iterator[None]:
        """Log failures with model/operation context, then re-raise unchanged."""
        extra = {
            "model_name": self.model_name,
            "operation": operation.value,
            "record_id": record_id,
        }
        try:
            yield
        except RecordStoreError as e:
            extra["error_code"] = e.code
            if e.is_client_error:
                logger.warning(
                    f"Rejected {operation.value} for {self.model_name}: {e.message}",
                    extra=extra,
                )
            else:
                logger.error(
                    f"Error in {operation.value} for {self.model_name}: {e.message}",
                    extra=extra,
                )
            raise
        except Exception as e:
            logger.error(
                f"Error in {operation.value} for {self.model_name}: {e}",
                extra=extra, exc_info=True,
            )
            raise

    # ─── Reads ──────────────────────────────────────────────────

    async def list_records(
        self, params: Mapping[str, Any] | None = None, *, timeout: Any = _UNSET,
    ) -> ListResult:
        params = params or {}
        with self._operation(Operation.LIST):
            page, limit, _ = resolve_page_window(params)
            plan = self.build_plan(params)
            deadline = self._timeout(timeout)
            data, total = await gather_or_cancel(
                self._storage.select_rows(
                    self.table, plan.predicate, plan.order, plan.projection,
                    plan.limit, plan.offset, timeout=deadline,
                ),
                self._storage.count_rows(self.table, plan.predicate, timeout=deadline),
            )
            return ListResult(data, Pagination.from_total(page, limit, total))

    async def get_by_id(
        self, record_id: str, include_deleted: bool = False, *, timeout: Any = _UNSET,
    ) -> Record | None:
        with self._operation(Operation.GET_BY_ID, record_id):
            predicate = identity_predicate(
                self.table, record_id, deleted=None if include_deleted else False,
            )
            rows = await self._storage.select_rows(
                self.table, predicate, (), None, 1, 0,
                timeout=self._timeout(timeout),
            )
            return rows[0] if rows else None

    async def count(
        self, params: Mapping[str, Any] | None = None, *, timeout: Any = _UNSET,
    ) -> int:
        params = params or {}
        with self._operation(Operation.COUNT):
            return await self._storage.count_rows(
                self.table, self.build_filter_predicate(params),
                timeout=self._timeout(timeout),
            )

    # ─── Writes ─────────────────────────────────────────────────

    async def create(
        self, values: Mapping[str, Any], *, timeout: Any = _UNSET,
    ) -> Record:
        with self._operation(Operation.CREATE):
            record_id = self._id_factory()
            row = {**self.writable_values(values), self.table.standard.public_id: record_id}
            created = await self._storage.insert_row(
                self.table, row, timeout=self._timeout(timeout),
            )
            logger.info(
                f"Created new {self.model_name} with id: {record_id}",
                extra={"model_name": self.model_name, "record_id": record_id},
            )
            return created

    async def bulk_create(
        self, items: Sequence[Mapping[str, Any]], *, timeout: Any = _UNSET,
    ) -> list[Record]:
        if not items:
            return []
        with self._operation(Operation.BULK_CREATE):
            rows = [
                {**self.writable_values(item), self.table.standard.public_id: self._id_factory()}
                for item in items
            ]
            created = await self._storage.insert_rows(
                self.table, rows, timeout=self._timeout(timeout),
            )
            logger.info(
                f"Bulk created {len(created)} {self.model_name} records",
                extra={"model_name": self.model_name},
            )
            return created

    async def update(
        self, record_id: str, patch: Mapping[str, Any], *, timeout: Any = _UNSET,
    ) -> Record | None:
        with self._operation(Operation.UPDATE, record_id):
            values = self.writable_values(patch, self.table.standard.immutable())
        if not values:
            return await self.get_by_id(record_id, timeout=timeout)
        with self._operation(Operation.UPDATE, record_id):
            updated = await self._storage.update_row(
                self.table, identity_predicate(self.table, record_id), values,
                timeout=self._timeout(timeout),
            )
            if updated is not None:
                logger.info(
                    f"Updated {self.model_name} with id: {record_id}",
                    extra={"model_name": self.model_name, "record_id": record_id},
                )
            return updated

    async def soft_delete(self, record_id: str, *, timeout: Any = _UNSET) -> bool:
        with self._operation(Operation.SOFT_DELETE, record_id):
            updated = await self._storage.update_row(
                self.table,
                identity_predicate(self.table, record_id),
                {self.table.standard.deleted_at: datetime.now(timezone.utc)},
                timeout=self._timeout(timeout),
            )
            if updated is not None:
                logger.info(
                    f"Soft deleted {self.model_name} with id: {record_id}",
                    extra={"model_name": self.model_name, "record_id": record_id},
                )
            return updated is not None

    async def hard_delete(self, record_id: str, *, timeout: Any = _UNSET) -> bool:
        with self._operation(Operation.HARD_DELETE, record_id):
            deleted = await self._storage.delete_row(
                self.table, identity_predicate(self.table, record_id, deleted=None),
                timeout=self._timeout(timeout),
            )
            if deleted:
                logger.info(
                    f"Hard deleted {self.model_name} with id: {record_id}",
                    extra={"model_name": self.model_name, "record_id": record_id},
                )
            return deleted

    async def restore(self, record_id: str, *, timeout: Any = _UNSET) -> Record | None:
        with self._operation(Operation.RESTORE, record_id):
            restored = await self._storage.update_row(
                self.table,
                identity_predicate(self.table, record_id, deleted=True),
                {self.table.standard.deleted_at: None},
                timeout=self._timeout(timeout),
            )
            if restored is not None:
                logger.info(
                    f"Restored {self.model_name} with id: {record_id}",
                    extra={"model_name": self.model_name, "record_id": record_id},
                )
            return restored
