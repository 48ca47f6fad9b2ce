"""
models/payment.py — Payment table definition.

A payment is a direct transfer between two participants of an event. It is
not tied to any expense: it reduces the pairwise debt in aggregate.

Key design points:
  - `amount` uses Numeric(12, 2) — never Float.
  - CHECK(payer_id <> receiver_id) backs up the SELF_PAYMENT check in
    payment_service.py.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db


class Payment(db.Model):
    __tablename__ = "payments"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        CheckConstraint(
            "payer_id <> receiver_id",
            name="ck_payments_no_self_payment",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    payer_id: Mapped[int] = mapped_column(
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
    )

    receiver_id: Mapped[int] = mapped_column(
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    notes: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        server_default="",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    event: Mapped["Event"] = relationship(  # noqa: F821
        "Event",
        back_populates="payments",
    )

    payer: Mapped["Participant"] = relationship(  # noqa: F821
        "Participant",
        foreign_keys=[payer_id],
    )

    receiver: Mapped["Participant"] = relationship(  # noqa: F821
        "Participant",
        foreign_keys=[receiver_id],
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Payment id={self.id} "
            f"event_id={self.event_id} "
            f"from={self.payer_id} "
            f"to={self.receiver_id} "
            f"amount={self.amount}>"
        )
