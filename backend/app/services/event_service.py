"""
services/event_service.py — Events, participants and event rosters.

A participant exists on its own and joins events through the roster
(event_participants). Only participants on an event's roster take part in
that event's expenses, payments and balances.

An event moves between planning, active and completed; at most one event
is active at a time. A participant leaves a roster only while it has no
expenses, shares or payments in that event.

Layer rules (GUIDE Rule 3):
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Returns ORM objects; routes serialise them with the output schemas.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from backend.app.errors import AppError, ErrorCode
from backend.app.ledger.records import name_sort_key
from backend.app.models.event import Event, EventStatus
from backend.app.models.event_participant import EventParticipant
from backend.app.models.expense import Expense
from backend.app.models.expense_share import ExpenseShare
from backend.app.models.participant import Participant
from backend.app.models.payment import Payment

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def get_event_or_404(event_id: int, session: Session) -> Event:
    """Returns the Event or raises EVENT_NOT_FOUND (404)."""
    event = session.get(Event, event_id)
    if event is None:
        raise AppError(
            ErrorCode.EVENT_NOT_FOUND,
            f"Event {event_id} does not exist.",
            404,
        )
    return event


def _get_participant_or_404(participant_id: int, session: Session) -> Participant:
    """Returns the Participant or raises PARTICIPANT_NOT_FOUND (404)."""
    participant = session.get(Participant, participant_id)
    if participant is None:
        raise AppError(
            ErrorCode.PARTICIPANT_NOT_FOUND,
            f"Participant {participant_id} does not exist.",
            404,
            field="participant_id",
        )
    return participant


# ── Events ─────────────────────────────────────────────────────────────────

def create_event(data: dict, session: Session) -> Event:
    """
    Creates an event.

    Args:
        data: Validated dict from CreateEventSchema.
              Keys: name, and optionally year, start_date, end_date, status.
    """
    event = Event(
        name=data["name"].strip(),
        year=data.get("year"),
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
        status=data.get("status") or EventStatus.PLANNING,
    )
    session.add(event)
    session.flush()
    logger.info("Created event %s (%r)", event.id, event.name)
    return event


def list_events(session: Session) -> list[Event]:
    """All events, newest first."""
    stmt = select(Event).order_by(Event.created_at.desc(), Event.id.desc())
    return list(session.execute(stmt).scalars().all())


def get_event(event_id: int, session: Session) -> Event:
    return get_event_or_404(event_id, session)


def update_event_status(event_id: int, status: EventStatus, session: Session) -> Event:
    """
    Moves an event to `status`.

    Only one event is active at a time: activating an event marks every
    other active event as completed.
    """
    event = get_event_or_404(event_id, session)

    if status is EventStatus.ACTIVE:
        session.execute(
            update(Event)
            .where(Event.status == EventStatus.ACTIVE, Event.id != event_id)
            .values(status=EventStatus.COMPLETED)
        )

    event.status = status
    session.flush()
    logger.info("Event %s is now %s", event_id, status.value)
    return event


# ── Participants ───────────────────────────────────────────────────────────

def create_participant(data: dict, session: Session) -> Participant:
    """
    Creates a participant (household). It takes part in no event until it
    is added to a roster with add_participant_to_event().
    """
    participant = Participant(
        name=data["name"].strip(),
        type=data["type"],
        children=data.get("children", 0),
    )
    session.add(participant)
    session.flush()
    return participant


def add_participant_to_event(
        event_id: int,
        participant_id: int,
        session: Session,
) -> Participant:
    """
    Puts a participant on an event's roster.

    Raises:
      AppError(EVENT_NOT_FOUND, 404)
      AppError(PARTICIPANT_NOT_FOUND, 404)
      AppError(ALREADY_IN_EVENT, 409) — the participant is already on the roster
    """
    get_event_or_404(event_id, session)
    participant = _get_participant_or_404(participant_id, session)

    existing = session.execute(
        select(EventParticipant).where(
            EventParticipant.event_id == event_id,
            EventParticipant.participant_id == participant_id,
        )
    ).scalar_one_or_none()

    if existing is not None:
        raise AppError(
            ErrorCode.ALREADY_IN_EVENT,
            f"Participant {participant_id} is already part of event {event_id}.",
            409,
            field="participant_id",
        )

    session.add(EventParticipant(event_id=event_id, participant_id=participant_id))
    session.flush()
    logger.info("Participant %s joined event %s", participant_id, event_id)
    return participant


def list_event_participants(event_id: int, session: Session) -> list[Participant]:
    """Roster of an event, sorted by name (case- and accent-insensitive)."""
    get_event_or_404(event_id, session)
    stmt = (
        select(Participant)
        .join(EventParticipant, EventParticipant.participant_id == Participant.id)
        .where(EventParticipant.event_id == event_id)
    )
    participants = list(session.execute(stmt).scalars().all())
    participants.sort(key=lambda p: (name_sort_key(p.name), p.name, p.id))
    return participants


def _ledger_record_count(event_id: int, participant_id: int, session: Session) -> int:
    """Expenses paid, shares held and payments made or received in the event."""
    statements = (
        select(Expense.id).where(
            Expense.event_id == event_id,
            Expense.payer_id == participant_id,
        ),
        select(ExpenseShare.id)
        .join(Expense, ExpenseShare.expense_id == Expense.id)
        .where(
            Expense.event_id == event_id,
            ExpenseShare.participant_id == participant_id,
        ),
        select(Payment.id).where(
            Payment.event_id == event_id,
            or_(Payment.payer_id == participant_id, Payment.receiver_id == participant_id),
        ),
    )
    return sum(
        session.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        for stmt in statements
    )


def remove_participant_from_event(
        event_id: int,
        participant_id: int,
        session: Session,
) -> None:
    """
    Takes a participant off an event's roster.

    Raises:
      AppError(EVENT_NOT_FOUND, 404)
      AppError(PARTICIPANT_NOT_IN_EVENT, 404)
      AppError(PARTICIPANT_HAS_RECORDS, 409) — the participant still pays for,
          shares in, or made/received payments in this event
    """
    get_event_or_404(event_id, session)

    roster_row = session.execute(
        select(EventParticipant).where(
            EventParticipant.event_id == event_id,
            EventParticipant.participant_id == participant_id,
        )
    ).scalar_one_or_none()

    if roster_row is None:
        raise AppError(
            ErrorCode.PARTICIPANT_NOT_IN_EVENT,
            f"Participant {participant_id} is not part of event {event_id}.",
            404,
        )

    if _ledger_record_count(event_id, participant_id, session):
        raise AppError(
            ErrorCode.PARTICIPANT_HAS_RECORDS,
            f"Participant {participant_id} still has expenses or payments in event "
            f"{event_id}. Delete them first.",
            409,
        )

    session.delete(roster_row)
    session.flush()
    logger.info("Participant %s left event %s", participant_id, event_id)
