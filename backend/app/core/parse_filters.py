"""Filter Parser - turns a raw parameter map into typed filter clauses.

Invariants:
    - Reserved control keys (page, limit, sort, select, deleted) are never filters
    - Suffixes are matched longest first: `age_gte` -> (age, gte), never (age_g, ...)
    - No suffix -> operator eq with the key verbatim as field
    - Output preserves input order
    - Schema-agnostic: unknown fields pass through, the predicate builder drops them

Design Decisions:
    - Suffix table sorted by length at import time, scanned in order
    - A key that is only a suffix (`_in`) is an eq filter on itself
"""

from typing import Any, Mapping

from app.core.domain_types import FilterOperator
from app.core.query_types import FilterClause, FilterValue

RESERVED_KEYS = frozenset({"page", "limit", "sort", "select", "deleted"})

_SUFFIXES: tuple[tuple[str, FilterOperator], ...] = tuple(sorted(
    (
        ("_ne", FilterOperator.NE),
        ("_lt", FilterOperator.LT),
        ("_gt", FilterOperator.GT),
        ("_lte", FilterOperator.LTE),
        ("_gte", FilterOperator.GTE),
        ("_in", FilterOperator.IN),
        ("_prefix", FilterOperator.PREFIX),
        ("_suffix", FilterOperator.SUFFIX),
        ("_substr", FilterOperator.SUBSTR),
    ),
    key=lambda pair: len(pair[0]),
    reverse=True,
))


def split_operator(key: str) -> tuple[str, FilterOperator]:
    """Split a parameter name into (field, operator)."""
    for suffix, operator in _SUFFIXES:
        if key.endswith(suffix) and len(key) > len(suffix):
            return key[: -len(suffix)], operator
    return key, FilterOperator.EQ


def _normalize_value(operator: FilterOperator, value: Any) -> FilterValue:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    if operator is FilterOperator.IN:
        return (value,)
    return value


def parse_filters(params: Mapping[str, Any]) -> list[FilterClause]:
    """Parse every non-reserved parameter into a FilterClause. Pure, no IO."""
    clauses = []
    for key, value in params.items():
        if key in RESERVED_KEYS:
            continue
        field, operator = split_operator(key)
        clauses.append(
            FilterClause(field, operator, _normalize_value(operator, value)),
        )
    return clauses
