"""Query Types - immutable value objects flowing through the query translator.

Invariants:
    - Every TableDescriptor exposes the six standard columns (checked at construction)
    - created_at and deleted_at are timestamps; deleted_at is nullable
    - All types are frozen: built once per request (or per table), never mutated
    - Nothing here knows about SQLAlchemy - the adapter translates these to SQL

Design Decisions:
    - TableDescriptor doubles as the schema registry: resolve_column() is the only
      lookup the builders need, so filters/sort/select never touch ORM metadata
    - StandardColumns holds names, not columns: tables may rename the standard columns
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from app.core.domain_types import ColumnKind, ComparisonOp, FilterOperator, SortDirection
from app.core.errors import TableRegistrationError

Scalar = str | int | float | bool
FilterValue = Scalar | tuple[Scalar, ...]


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    kind: ColumnKind
    nullable: bool = True


@dataclass(frozen=True)
class StandardColumns:
    """Names of the columns every registered table must expose."""
    internal_key: str = "wid"
    public_id: str = "id"
    name: str = "name"
    payload: str = "data"
    created_at: str = "created_at"
    deleted_at: str = "deleted_at"

    def all(self) -> tuple[str, ...]:
        return (
            self.internal_key, self.public_id, self.name,
            self.payload, self.created_at, self.deleted_at,
        )

    def immutable(self) -> frozenset[str]:
        """Columns a caller may never write (set once on insert)."""
        return frozenset({self.internal_key, self.public_id, self.created_at})

    def insert_protected(self) -> frozenset[str]:
        """Columns a caller may not supply on create: immutables plus deleted_at."""
        return self.immutable() | {self.deleted_at}


@dataclass(frozen=True)
class TableDescriptor:
    """Schema of one registered table: name, columns by name, standard columns."""
    name: str
    columns: Mapping[str, ColumnDescriptor]
    standard: StandardColumns = field(default_factory=StandardColumns)

    def __post_init__(self):
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))
        missing = [c for c in self.standard.all() if c not in self.columns]
        if missing:
            raise TableRegistrationError(
                self.name, f"missing standard columns: {', '.join(missing)}",
            )
        for col in (self.standard.created_at, self.standard.deleted_at):
            if self.columns[col].kind is not ColumnKind.TIMESTAMP:
                raise TableRegistrationError(self.name, f"'{col}' must be a timestamp")
        if not self.columns[self.standard.deleted_at].nullable:
            raise TableRegistrationError(
                self.name, f"'{self.standard.deleted_at}' must be nullable",
            )

    def resolve_column(self, name: str) -> ColumnDescriptor | None:
        return self.columns.get(name)

    def column_names(self) -> tuple[str, ...]:
        return tuple(self.columns)


@dataclass(frozen=True)
class FilterClause:
    field: str
    operator: FilterOperator
    value: FilterValue


@dataclass(frozen=True)
class Comparison:
    """One predicate term. Terms of a predicate are combined with AND."""
    column: str
    op: ComparisonOp
    value: Any = None


Predicate = tuple[Comparison, ...]


@dataclass(frozen=True)
class OrderTerm:
    column: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class QueryPlan:
    """Everything the adapter needs for one paginated read."""
    predicate: Predicate
    order: tuple[OrderTerm, ...]
    projection: tuple[str, ...] | None
    limit: int
    offset: int
