"""Standard Record Columns - the six columns every registered table carries.

Invariants:
    - wid: integer primary key, assigned by storage
    - id: public string identifier, unique, assigned by the engine on insert
    - name: human-readable, non-nullable
    - data: JSON object payload, defaults to {}
    - created_at: timezone-aware, set on insert, never updated
    - deleted_at: NULL while live; set by soft delete, cleared by restore
    - id, name, created_at, deleted_at are indexed

Design Decisions:
    - Declarative mixin instead of a table factory: concrete models add their own
      columns next to the standard ones
    - JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column


class StandardRecordMixin:
    """Adds wid, id, name, data, created_at and deleted_at."""

    wid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    data: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True,
    )
