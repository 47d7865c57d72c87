"""At most one in-progress inspection per clock.

A partial unique index makes the database reject a second 'in_progress'
row for the same clock, even if two writers both passed the
application-level check.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

INDEX_NAME = "ux_inspections_active_clock"


def upgrade() -> None:
    op.create_index(
        INDEX_NAME,
        "inspections",
        ["clock_id"],
        unique=True,
        sqlite_where=sa.text("status = 'in_progress'"),
    )


def downgrade() -> None:
    op.drop_index(INDEX_NAME, table_name="inspections")
