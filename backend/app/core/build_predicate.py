"""Predicate Builder - filter clauses + soft-delete policy -> conjunction of terms.

Invariants:
    - Unless include_deleted, the first term is `deleted_at IS NULL`
    - Clauses on unknown columns are silently skipped (never an error)
    - Clauses on json columns are skipped (no comparison semantics)
    - Values are coerced to the column's kind; uncoercible values raise FilterValueError
    - Integer filter values outside the signed 64-bit range raise FilterValueError
    - Pattern operators escape %, _ and the escape char: user input is a literal
    - Pattern operators only apply to text columns

Design Decisions:
    - Terms are plain Comparison objects: the storage adapter owns SQL generation
    - ISO-8601 parsing accepts a trailing `Z` (fromisoformat does not on 3.10)
"""

from datetime import datetime
from typing import Any

from app.core.domain_types import ColumnKind, ComparisonOp, FilterOperator
from app.core.errors import FilterValueError
from app.core.query_types import (
    ColumnDescriptor, Comparison, FilterClause, Predicate, Scalar, TableDescriptor,
)

LIKE_ESCAPE = "\\"

_DIRECT_OPS = {
    FilterOperator.EQ: ComparisonOp.EQ,
    FilterOperator.NE: ComparisonOp.NE,
    FilterOperator.LT: ComparisonOp.LT,
    FilterOperator.GT: ComparisonOp.GT,
    FilterOperator.LTE: ComparisonOp.LTE,
    FilterOperator.GTE: ComparisonOp.GTE,
}

_PATTERN_OPS = {
    FilterOperator.PREFIX: "{}%",
    FilterOperator.SUFFIX: "%{}",
    FilterOperator.SUBSTR: "%{}%",
}

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_TRUE = frozenset({"true", "1"})
_FALSE = frozenset({"false", "0"})


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so the value matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _check_int_range(column: ColumnDescriptor, value: Any, number: int) -> int:
    if not INT64_MIN <= number <= INT64_MAX:
        raise FilterValueError(column.name, value, "integer out of 64-bit range")
    return number


def _to_number(column: ColumnDescriptor, value: Any) -> int | float:
    if isinstance(value, bool):
        raise FilterValueError(column.name, value, "expected a number")
    if isinstance(value, int):
        return _check_int_range(column, value, value)
    if isinstance(value, float):
        return value
    text = str(value).strip()
    try:
        return _check_int_range(column, value, int(text))
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        raise FilterValueError(column.name, value, "expected a number") from None


def _to_boolean(column: ColumnDescriptor, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise FilterValueError(column.name, value, "expected true or false")


def parse_timestamp(value: Any) -> datetime:
    """ISO-8601 -> datetime; raises ValueError."""
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _to_timestamp(column: ColumnDescriptor, value: Any) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError:
        raise FilterValueError(
            column.name, value, "expected an ISO-8601 timestamp",
        ) from None


def coerce_value(column: ColumnDescriptor, value: Scalar) -> Any:
    """Resolve one scalar against the column's declared kind."""
    if column.kind is ColumnKind.NUMBER:
        return _to_number(column, value)
    if column.kind is ColumnKind.BOOLEAN:
        return _to_boolean(column, value)
    if column.kind is ColumnKind.TIMESTAMP:
        return _to_timestamp(column, value)
    return str(value)


def _first(clause: FilterClause) -> Scalar:
    if isinstance(clause.value, tuple):
        if not clause.value:
            raise FilterValueError(clause.field, clause.value, "expected a value")
        return clause.value[0]
    return clause.value


def _build_term(column: ColumnDescriptor, clause: FilterClause) -> Comparison:
    if clause.operator is FilterOperator.IN:
        values = tuple(coerce_value(column, v) for v in clause.value)
        return Comparison(column.name, ComparisonOp.IN, values)
    if clause.operator in _PATTERN_OPS:
        if column.kind is not ColumnKind.TEXT:
            raise FilterValueError(
                clause.field, clause.value,
                f"operator '{clause.operator.value}' requires a text column",
            )
        pattern = _PATTERN_OPS[clause.operator].format(
            escape_like(str(_first(clause))),
        )
        return Comparison(column.name, ComparisonOp.ILIKE, pattern)
    return Comparison(
        column.name, _DIRECT_OPS[clause.operator],
        coerce_value(column, _first(clause)),
    )


def build_predicate(
    clauses: list[FilterClause],
    table: TableDescriptor,
    include_deleted: bool = False,
) -> Predicate:
    """Build the AND-ed predicate terms for a table. Pure, no IO."""
    terms = []
    if not include_deleted:
        terms.append(Comparison(table.standard.deleted_at, ComparisonOp.IS_NULL))
    for clause in clauses:
        column = table.resolve_column(clause.field)
        if column is None or column.kind is ColumnKind.JSON:
            continue
        terms.append(_build_term(column, clause))
    return tuple(terms)


def identity_predicate(
    table: TableDescriptor, record_id: str, deleted: bool | None = False,
) -> Predicate:
    """Match one record by public id.

    deleted=False -> live rows only, True -> soft-deleted rows only,
    None -> either.
    """
    terms = [Comparison(table.standard.public_id, ComparisonOp.EQ, record_id)]
    if deleted is False:
        terms.append(Comparison(table.standard.deleted_at, ComparisonOp.IS_NULL))
    elif deleted is True:
        terms.append(Comparison(table.standard.deleted_at, ComparisonOp.IS_NOT_NULL))
    return tuple(terms)
