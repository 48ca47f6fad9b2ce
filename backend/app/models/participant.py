"""
models/participant.py — Participant table definition.

A participant is a household: an individual or a couple. Participants exist
independently of events and join events through event_participants.
`children` is informational and never weighs into a split.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db
from backend.app.ledger.records import ParticipantType
from backend.app.models.event import _enum_values


class Participant(db.Model):
    __tablename__ = "participants"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(name)) > 0",
            name="ck_participants_name_nonempty",
        ),
        CheckConstraint("children >= 0", name="ck_participants_children_nonnegative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    type: Mapped[ParticipantType] = mapped_column(
        Enum(
            ParticipantType,
            name="participant_type_enum",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=ParticipantType.INDIVIDUAL,
        server_default=ParticipantType.INDIVIDUAL.value,
    )

    children: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    events: Mapped[list["EventParticipant"]] = relationship(  # noqa: F821
        "EventParticipant",
        back_populates="participant",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Participant id={self.id} name={self.name!r} type={self.type.value}>"
