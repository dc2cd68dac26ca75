"""Standard record tables - people and organizations.

Revision ID: 001_standard_tables
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001_standard_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _standard_columns() -> list[sa.Column]:
    return [
        sa.Column("wid", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "data", sa.JSON().with_variant(JSONB(), "postgresql"),
            nullable=False, server_default="{}",
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            nullable=False, server_default=sa.func.now(),
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _standard_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_id", table, ["id"], unique=True)
    op.create_index(f"ix_{table}_name", table, ["name"])
    op.create_index(f"ix_{table}_created_at", table, ["created_at"])
    op.create_index(f"ix_{table}_deleted_at", table, ["deleted_at"])


def upgrade() -> None:
    op.create_table(
        "people",
        *_standard_columns(),
        sa.Column("age", sa.Integer, nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
    )
    _standard_indexes("people")

    op.create_table(
        "organizations",
        *_standard_columns(),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    _standard_indexes("organizations")


def downgrade() -> None:
    op.drop_table("organizations")
    op.drop_table("people")
