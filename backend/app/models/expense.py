"""
models/expense.py — Expense table definition.

No business logic. No imports from services or routes.

Key design points:
  - `amount` uses Numeric(12, 2) — never Float.
  - `payer_id` is nullable and ON DELETE SET NULL: an expense whose payer
    disappeared stays in the history but no longer counts in any balance.
  - `category` is stored as a plain string; the schema restricts new values
    to the Category enum, older rows may hold anything.
  - Shares are deleted together with their expense (ON DELETE CASCADE and
    the ORM cascade below).
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db
from backend.app.ledger.records import Category, DivisionType
from backend.app.models.event import _enum_values


class Expense(db.Model):
    __tablename__ = "expenses"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        CheckConstraint(
            "LENGTH(TRIM(description)) > 0",
            name="ck_expenses_description_nonempty",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    payer_id: Mapped[int | None] = mapped_column(
        ForeignKey("participants.id", ondelete="SET NULL"),
        nullable=True,
    )

    description: Mapped[str] = mapped_column(String(255), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=Category.OTHER.value,
        server_default=Category.OTHER.value,
    )

    date: Mapped[dt.date] = mapped_column(
        Date,
        nullable=False,
        server_default=func.current_date(),
    )

    division_type: Mapped[DivisionType] = mapped_column(
        Enum(
            DivisionType,
            name="division_type_enum",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=DivisionType.EQUAL,
        server_default=DivisionType.EQUAL.value,
    )

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    event: Mapped["Event"] = relationship(  # noqa: F821
        "Event",
        back_populates="expenses",
    )

    payer: Mapped["Participant | None"] = relationship(  # noqa: F821
        "Participant",
        foreign_keys=[payer_id],
    )

    shares: Mapped[list["ExpenseShare"]] = relationship(  # noqa: F821
        "ExpenseShare",
        back_populates="expense",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ExpenseShare.id",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Expense id={self.id} "
            f"event_id={self.event_id} "
            f"amount={self.amount}>"
        )
