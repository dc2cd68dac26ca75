"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - ModelName, RecordId wrap str - never pass bare strings between layers
    - Record is a plain dict keyed by column name (JSON-serializable via FastAPI)
    - All closed vocabularies encoded as str Enums - no raw string matching

Design Decisions:
    - NewType over dataclass wrappers
    - str Enums: serialize to JSON and compare equal to their wire value
"""

from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

ModelName = NewType("ModelName", str)
RecordId = NewType("RecordId", str)

Record = dict[str, Any]


# ─── Enums ───────────────────────────────────────────────────────

class ColumnKind(str, Enum):
    """Scalar kind of a column, as seen by the query translator."""
    TEXT = "text"
    NUMBER = "number"
    TIMESTAMP = "timestamp"
    BOOLEAN = "boolean"
    JSON = "json"


class FilterOperator(str, Enum):
    """Operators a client can express through a parameter-name suffix."""
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    GT = "gt"
    LTE = "lte"
    GTE = "gte"
    IN = "in"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    SUBSTR = "substr"


class ComparisonOp(str, Enum):
    """Operators of a built predicate term - consumed by the storage adapter."""
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    GT = "gt"
    LTE = "lte"
    GTE = "gte"
    IN = "in"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    ILIKE = "ilike"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Operation(str, Enum):
    """Engine operations - used as the `operation` log field."""
    LIST = "list"
    GET_BY_ID = "get_by_id"
    CREATE = "create"
    UPDATE = "update"
    SOFT_DELETE = "soft_delete"
    HARD_DELETE = "hard_delete"
    RESTORE = "restore"
    BULK_CREATE = "bulk_create"
    COUNT = "count"
