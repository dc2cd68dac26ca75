"""Order/Projection Builder - sort and select parameters -> validated lists.

Invariants:
    - No sort -> created_at descending; every token dropped -> same default
    - `desc_` prefix -> descending, otherwise ascending; keys kept in given order
    - No select -> None (all columns); empty resolved set -> None (never zero columns)
    - Unknown columns are silently dropped; json columns are not sortable
"""

from app.core.domain_types import ColumnKind, SortDirection
from app.core.query_types import OrderTerm, TableDescriptor

DESC_PREFIX = "desc_"


def _tokens(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [t.strip() for t in str(raw).split(",") if t.strip()]


def default_order(table: TableDescriptor) -> tuple[OrderTerm, ...]:
    return (OrderTerm(table.standard.created_at, SortDirection.DESC),)


def build_order(sort: str | None, table: TableDescriptor) -> tuple[OrderTerm, ...]:
    """Resolve a comma-separated sort parameter against the table."""
    terms = []
    for token in _tokens(sort):
        direction = SortDirection.ASC
        if token.startswith(DESC_PREFIX):
            token = token[len(DESC_PREFIX):]
            direction = SortDirection.DESC
        column = table.resolve_column(token)
        if column is None or column.kind is ColumnKind.JSON:
            continue
        terms.append(OrderTerm(column.name, direction))
    return tuple(terms) or default_order(table)


def build_projection(select: str | None, table: TableDescriptor) -> tuple[str, ...] | None:
    """Resolve a comma-separated select parameter; None means all columns."""
    columns: list[str] = []
    for token in _tokens(select):
        column = table.resolve_column(token)
        if column is not None and column.name not in columns:
            columns.append(column.name)
    return tuple(columns) or None
