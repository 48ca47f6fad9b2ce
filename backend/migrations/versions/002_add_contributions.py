"""Add the contributions table.

Revision: 002_add_contributions
Created:  2026-10-18

Contributions record money a participant put into the common fund for a
given month. They are independent of events and of the expense balances.

  contributions.participant_id → RESTRICT (a participant with contributions
                                 cannot be deleted)
  month                        → first day of the month
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# ── Alembic revision identifiers ──────────────────────────────────────────
revision: str = "002_add_contributions"
down_revision: str | None = "001_initial_schema"
branch_labels: tuple | None = None
depends_on: tuple | None = None


def upgrade() -> None:
    op.create_table(
        "contributions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "participant_id",
            sa.Integer(),
            sa.ForeignKey(
                "participants.id",
                ondelete="RESTRICT",
                name="fk_contributions_participant",
            ),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("notes", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_contributions"),
        sa.CheckConstraint("amount > 0", name="ck_contributions_amount_positive"),
    )
    op.create_index("ix_contributions_participant_id", "contributions", ["participant_id"])


def downgrade() -> None:
    op.drop_index("ix_contributions_participant_id", table_name="contributions")
    op.drop_table("contributions")
