"""
models/event.py — Event ("carnival") table definition.

No business logic. No imports from services or routes.

An event owns a participant roster (event_participants), its expenses and
its payments. All FKs pointing at events are ON DELETE RESTRICT.
"""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db


class EventStatus(str, enum.Enum):
    PLANNING  = "planning"
    ACTIVE    = "active"
    COMPLETED = "completed"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Store enum values (e.g., 'active'), not names ('ACTIVE')."""
    return [member.value for member in enum_cls]


class Event(db.Model):
    __tablename__ = "events"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(name)) > 0",
            name="ck_events_name_nonempty",
        ),
        CheckConstraint(
            "end_date IS NULL OR start_date IS NULL OR end_date >= start_date",
            name="ck_events_dates_ordered",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    status: Mapped[EventStatus] = mapped_column(
        Enum(
            EventStatus,
            name="event_status_enum",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=EventStatus.PLANNING,
        server_default=EventStatus.PLANNING.value,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    roster: Mapped[list["EventParticipant"]] = relationship(  # noqa: F821
        "EventParticipant",
        back_populates="event",
    )

    expenses: Mapped[list["Expense"]] = relationship(  # noqa: F821
        "Expense",
        back_populates="event",
    )

    payments: Mapped[list["Payment"]] = relationship(  # noqa: F821
        "Payment",
        back_populates="event",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Event id={self.id} name={self.name!r}>"
