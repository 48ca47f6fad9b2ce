"""
models/event_participant.py — Event roster junction table.

FK policy: both columns ON DELETE RESTRICT — neither an event nor a
participant can be deleted while it is on a roster.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db


class EventParticipant(db.Model):
    __tablename__ = "event_participants"

    __table_args__ = (
        UniqueConstraint("event_id", "participant_id", name="uq_event_participants_pair"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    participant_id: Mapped[int] = mapped_column(
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    event: Mapped["Event"] = relationship(  # noqa: F821
        "Event",
        back_populates="roster",
    )

    participant: Mapped["Participant"] = relationship(  # noqa: F821
        "Participant",
        back_populates="events",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<EventParticipant event_id={self.event_id} "
            f"participant_id={self.participant_id}>"
        )
