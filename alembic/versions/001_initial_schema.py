"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Behavioral events
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("ts", sa.DateTime(), nullable=False),
        sa.Column("session_id", sa.String(128), nullable=True),
        sa.Column("ip", sa.Text(), nullable=False, server_default=""),
        sa.Column("page", sa.Text(), nullable=False, server_default=""),
        sa.Column("type", sa.String(100), nullable=False, server_default="custom"),
        sa.Column("payload", sa.Text(), nullable=False, server_default="{}"),
    )
    op.create_index("idx_events_ts", "events", ["ts"])
    op.create_index("idx_events_type", "events", ["type"])
    op.create_index("idx_events_session_id", "events", ["session_id"])

    # Quiz results
    op.create_table(
        "results",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("ts", sa.DateTime(), nullable=False),
        sa.Column("session_id", sa.String(128), nullable=True),
        sa.Column("result_name", sa.Text(), nullable=False, server_default=""),
        sa.Column("score_json", sa.Text(), nullable=False, server_default="{}"),
    )
    op.create_index("idx_results_ts", "results", ["ts"])
    op.create_index("idx_results_session_id", "results", ["session_id"])


def downgrade() -> None:
    op.drop_index("idx_results_session_id", table_name="results")
    op.drop_index("idx_results_ts", table_name="results")
    op.drop_table("results")
    op.drop_index("idx_events_session_id", table_name="events")
    op.drop_index("idx_events_type", table_name="events")
    op.drop_index("idx_events_ts", table_name="events")
    op.drop_table("events")
