"""Initial schema: contacts, properties, clocks, inspections.

Each level owns the next through an ON DELETE CASCADE foreign key:
contact -> property -> clock -> inspection.

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _auto_pk():
    return sa.Column("id", sa.Integer, primary_key=True, autoincrement=True)


def _now():
    """SQLite text timestamp, e.g. '2024-01-01 09:30:00' (UTC)."""
    return sa.text("(datetime('now'))")


def _timestamps():
    return [
        sa.Column("created_at", sa.Text, nullable=False, server_default=_now()),
        sa.Column("updated_at", sa.Text, nullable=False, server_default=_now()),
    ]


# ---------------------------------------------------------------------------
# upgrade
# ---------------------------------------------------------------------------

def upgrade() -> None:
    op.create_table(
        "contacts",
        _auto_pk(),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("phone", sa.Text),
        sa.Column("email", sa.Text),
        sa.Column("organization", sa.Text),
        *_timestamps(),
    )

    op.create_table(
        "properties",
        _auto_pk(),
        sa.Column(
            "contact_id", sa.Integer,
            sa.ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("address", sa.Text, nullable=False, unique=True),
        sa.Column("city", sa.Text),
        sa.Column("state", sa.Text),
        sa.Column("postal_code", sa.Text),
        sa.Column("notes", sa.Text),
        *_timestamps(),
    )
    op.create_index("idx_properties_contact_id", "properties", ["contact_id"])
    op.create_index("idx_properties_address", "properties", ["address"])

    op.create_table(
        "clocks",
        _auto_pk(),
        sa.Column(
            "property_id", sa.Integer,
            sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("label", sa.Text, nullable=False),
        sa.Column("manufacturer", sa.Text),
        sa.Column("model", sa.Text),
        sa.Column("station_count", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("location", sa.Text),
        sa.Column("notes", sa.Text),
        *_timestamps(),
    )
    op.create_index("idx_clocks_property_id", "clocks", ["property_id"])

    op.create_table(
        "inspections",
        _auto_pk(),
        sa.Column(
            "clock_id", sa.Integer,
            sa.ForeignKey("clocks.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("status", sa.Text, nullable=False, server_default=sa.text("'in_progress'")),
        sa.Column("started_at", sa.Text, nullable=False, server_default=_now()),
        sa.Column("completed_at", sa.Text),
        sa.Column("summary", sa.Text),
        sa.Column("notes", sa.Text),
        *_timestamps(),
    )
    op.create_index("idx_inspections_clock_id", "inspections", ["clock_id"])
    op.create_index("idx_inspections_status", "inspections", ["status"])


def downgrade() -> None:
    # Children first
    for table in ("inspections", "clocks", "properties", "contacts"):
        op.drop_table(table)
