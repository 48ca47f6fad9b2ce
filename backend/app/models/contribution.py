"""
models/contribution.py — Contribution table definition.

A contribution is money a participant put into the common fund for a month.
It is not tied to an event and never enters the expense balances.

Key design points:
  - `amount` uses Numeric(12, 2) — never Float.
  - `month` is stored as the first day of the month.
  - participant_id is ON DELETE RESTRICT.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db


class Contribution(db.Model):
    __tablename__ = "contributions"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_contributions_amount_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    participant_id: Mapped[int] = mapped_column(
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    month: Mapped[dt.date] = mapped_column(Date, nullable=False)

    notes: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    participant: Mapped["Participant"] = relationship("Participant")  # noqa: F821

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Contribution id={self.id} "
            f"participant_id={self.participant_id} "
            f"month={self.month:%Y-%m} "
            f"amount={self.amount}>"
        )
