"""Table Schema - derives a TableDescriptor from SQLAlchemy table metadata.

Invariants:
    - Every column of the table appears in the descriptor (keyed by column name)
    - Kind mapping: Boolean -> boolean, numeric -> number, Date/DateTime -> timestamp,
      JSON -> json, everything else -> text
    - Missing standard columns raise TableRegistrationError (from TableDescriptor)
"""

from sqlalchemy import Boolean, Date, DateTime, JSON, Numeric, Integer, Float, Table
from sqlalchemy.types import TypeEngine

from app.core.domain_types import ColumnKind
from app.core.query_types import ColumnDescriptor, StandardColumns, TableDescriptor


def column_kind(sa_type: TypeEngine) -> ColumnKind:
    """Map a SQLAlchemy column type to the translator's scalar kind."""
    # Boolean first: some dialect booleans subclass Integer
    if isinstance(sa_type, Boolean):
        return ColumnKind.BOOLEAN
    if isinstance(sa_type, (Integer, Numeric, Float)):
        return ColumnKind.NUMBER
    if isinstance(sa_type, (DateTime, Date)):
        return ColumnKind.TIMESTAMP
    if isinstance(sa_type, JSON):
        return ColumnKind.JSON
    return ColumnKind.TEXT


def describe_table(
    table: Table, standard: StandardColumns | None = None,
) -> TableDescriptor:
    """Build the schema registry entry for one SQLAlchemy table."""
    columns = {
        col.name: ColumnDescriptor(col.name, column_kind(col.type), bool(col.nullable))
        for col in table.columns
    }
    return TableDescriptor(table.name, columns, standard or StandardColumns())
