"""Initial schema — all tables, constraints, and indexes.

Revision: 001_initial_schema
Created:  2026-10-18

Append-only:
  This file must NEVER be edited after it has been applied to any database.
  If a schema change is required, create a NEW migration file.

Creation order:
  Tables in FK dependency order (events, participants → event_participants
  → expenses → expense_shares, payments), then indexes.

Enumerated columns (participant type, event status, division type) are
VARCHAR with a CHECK constraint rather than PostgreSQL ENUM types, so the
same schema runs on SQLite for local development and tests. `category` is a
free-form VARCHAR; the API restricts new values.

ON DELETE policies:
  event_participants.*        → RESTRICT  (cannot delete event/participant on a roster)
  expenses.event_id           → RESTRICT
  expenses.payer_id           → SET NULL  (expense stays, stops counting in balances)
  expense_shares.expense_id   → CASCADE   (shares owned by expense)
  expense_shares.participant  → RESTRICT
  payments.*                  → RESTRICT
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# ── Alembic revision identifiers ──────────────────────────────────────────
revision: str = "001_initial_schema"
down_revision: str | None = None      # first migration — no parent
branch_labels: tuple | None = None
depends_on: tuple | None = None


def upgrade() -> None:
    """Apply the full initial schema."""

    # ── Step 1: events ─────────────────────────────────────────────────────

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default="planning",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_events"),
        sa.CheckConstraint("LENGTH(TRIM(name)) > 0", name="ck_events_name_nonempty"),
        sa.CheckConstraint(
            "end_date IS NULL OR start_date IS NULL OR end_date >= start_date",
            name="ck_events_dates_ordered",
        ),
        sa.CheckConstraint(
            "status IN ('planning', 'active', 'completed')",
            name="ck_events_status",
        ),
    )

    # ── Step 2: participants ───────────────────────────────────────────────

    op.create_table(
        "participants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "type",
            sa.String(20),
            nullable=False,
            server_default="individual",
        ),
        sa.Column("children", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_participants"),
        sa.CheckConstraint("LENGTH(TRIM(name)) > 0", name="ck_participants_name_nonempty"),
        sa.CheckConstraint("children >= 0", name="ck_participants_children_nonnegative"),
        sa.CheckConstraint(
            "type IN ('individual', 'couple')",
            name="ck_participants_type",
        ),
    )

    # ── Step 3: event_participants ─────────────────────────────────────────
    # Both FKs ON DELETE RESTRICT. UNIQUE(event_id, participant_id).

    op.create_table(
        "event_participants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="RESTRICT", name="fk_event_participants_event"),
            nullable=False,
        ),
        sa.Column(
            "participant_id",
            sa.Integer(),
            sa.ForeignKey(
                "participants.id",
                ondelete="RESTRICT",
                name="fk_event_participants_participant",
            ),
            nullable=False,
        ),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_event_participants"),
        sa.UniqueConstraint("event_id", "participant_id", name="uq_event_participants_pair"),
    )

    # ── Step 4: expenses ───────────────────────────────────────────────────

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="RESTRICT", name="fk_expenses_event"),
            nullable=False,
        ),
        sa.Column(
            "payer_id",
            sa.Integer(),
            sa.ForeignKey("participants.id", ondelete="SET NULL", name="fk_expenses_payer"),
            nullable=True,
        ),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("category", sa.String(50), nullable=False, server_default="other"),
        sa.Column(
            "date",
            sa.Date(),
            nullable=False,
            server_default=sa.text("CURRENT_DATE"),
        ),
        sa.Column(
            "division_type",
            sa.String(20),
            nullable=False,
            server_default="equal",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_expenses"),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        sa.CheckConstraint(
            "LENGTH(TRIM(description)) > 0",
            name="ck_expenses_description_nonempty",
        ),
        sa.CheckConstraint("division_type IN ('equal')", name="ck_expenses_division_type"),
    )

    # ── Step 5: expense_shares ─────────────────────────────────────────────
    # expense_id ON DELETE CASCADE — shares owned by their expense.
    # Zero shares are allowed (a participant can be selected for nothing).

    op.create_table(
        "expense_shares",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "expense_id",
            sa.Integer(),
            sa.ForeignKey("expenses.id", ondelete="CASCADE", name="fk_expense_shares_expense"),
            nullable=False,
        ),
        sa.Column(
            "participant_id",
            sa.Integer(),
            sa.ForeignKey(
                "participants.id",
                ondelete="RESTRICT",
                name="fk_expense_shares_participant",
            ),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_expense_shares"),
        sa.UniqueConstraint("expense_id", "participant_id", name="uq_expense_shares_pair"),
        sa.CheckConstraint("amount >= 0", name="ck_expense_shares_amount_nonnegative"),
    )

    # ── Step 6: payments ───────────────────────────────────────────────────
    # CHECK(payer_id <> receiver_id) backs up the SELF_PAYMENT service check.

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="RESTRICT", name="fk_payments_event"),
            nullable=False,
        ),
        sa.Column(
            "payer_id",
            sa.Integer(),
            sa.ForeignKey("participants.id", ondelete="RESTRICT", name="fk_payments_payer"),
            nullable=False,
        ),
        sa.Column(
            "receiver_id",
            sa.Integer(),
            sa.ForeignKey("participants.id", ondelete="RESTRICT", name="fk_payments_receiver"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.String(255), nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_payments"),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        sa.CheckConstraint("payer_id <> receiver_id", name="ck_payments_no_self_payment"),
    )

    # ── Step 7: Indexes ────────────────────────────────────────────────────
    # Names match the ORM's index=True naming (ix_<table>_<column>).

    op.create_index("ix_event_participants_event_id", "event_participants", ["event_id"])
    op.create_index(
        "ix_event_participants_participant_id", "event_participants", ["participant_id"],
    )
    op.create_index("ix_expenses_event_id", "expenses", ["event_id"])
    op.create_index("ix_expense_shares_expense_id", "expense_shares", ["expense_id"])
    op.create_index("ix_payments_event_id", "payments", ["event_id"])


def downgrade() -> None:
    """
    Drop all objects created in upgrade(), in reverse dependency order.
    Local development reset only; prefer a corrective migration in production.
    """
    op.drop_index("ix_payments_event_id",                 table_name="payments")
    op.drop_index("ix_expense_shares_expense_id",         table_name="expense_shares")
    op.drop_index("ix_expenses_event_id",                 table_name="expenses")
    op.drop_index("ix_event_participants_participant_id", table_name="event_participants")
    op.drop_index("ix_event_participants_event_id",       table_name="event_participants")

    op.drop_table("payments")
    op.drop_table("expense_shares")
    op.drop_table("expenses")
    op.drop_table("event_participants")
    op.drop_table("participants")
    op.drop_table("events")
