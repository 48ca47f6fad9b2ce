"""
models/expense_share.py — ExpenseShare table definition.

One row per participant per expense: what that participant owes for it.

Key design points:
  - `amount` uses Numeric(12, 2) — never Float. Zero is allowed.
  - expense_id is ON DELETE CASCADE — shares are owned by their expense.
  - participant_id is ON DELETE RESTRICT.
  - UNIQUE(expense_id, participant_id).

sum(shares.amount) == expense.amount is guaranteed for shares created
through expense_service (the split absorbs rounding cents) but is not a DB
constraint; the balance view reports drift on older rows instead.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db


class ExpenseShare(db.Model):
    __tablename__ = "expense_shares"

    __table_args__ = (
        UniqueConstraint("expense_id", "participant_id", name="uq_expense_shares_pair"),
        CheckConstraint("amount >= 0", name="ck_expense_shares_amount_nonnegative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    expense_id: Mapped[int] = mapped_column(
        ForeignKey("expenses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    participant_id: Mapped[int] = mapped_column(
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # ── Relationships ──────────────────────────────────────────────────────

    expense: Mapped["Expense"] = relationship(  # noqa: F821
        "Expense",
        back_populates="shares",
    )

    participant: Mapped["Participant"] = relationship("Participant")  # noqa: F821

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<ExpenseShare expense_id={self.expense_id} "
            f"participant_id={self.participant_id} "
            f"amount={self.amount}>"
        )
