"""Core test fixtures - hand-built table descriptors (no SQLAlchemy)."""

import pytest

from app.core.domain_types import ColumnKind
from app.core.query_types import ColumnDescriptor, TableDescriptor


def _make_table(**extra: ColumnKind) -> TableDescriptor:
    columns = {
        "wid": ColumnDescriptor("wid", ColumnKind.NUMBER, nullable=False),
        "id": ColumnDescriptor("id", ColumnKind.TEXT, nullable=False),
        "name": ColumnDescriptor("name", ColumnKind.TEXT, nullable=False),
        "data": ColumnDescriptor("data", ColumnKind.JSON, nullable=False),
        "created_at": ColumnDescriptor("created_at", ColumnKind.TIMESTAMP, nullable=False),
        "deleted_at": ColumnDescriptor("deleted_at", ColumnKind.TIMESTAMP),
    }
    for name, kind in extra.items():
        columns[name] = ColumnDescriptor(name, kind)
    return TableDescriptor("people", columns)


@pytest.fixture
def make_table():
    return _make_table


@pytest.fixture
def table() -> TableDescriptor:
    return _make_table(
        age=ColumnKind.NUMBER,
        email=ColumnKind.TEXT,
        active=ColumnKind.BOOLEAN,
    )
