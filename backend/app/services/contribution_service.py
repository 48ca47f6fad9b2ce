"""
services/contribution_service.py — Monthly contributions to the common fund.

Contributions belong to a participant, not to an event, and never enter the
expense balances. Totals per participant and the month grouping are computed
by ledger.reports over Contribution records.

Layer rules (GUIDE Rule 3):
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.errors import AppError, ErrorCode
from backend.app.ledger import records
from backend.app.ledger.reports import group_contributions_by_month, total_contributions
from backend.app.models.contribution import Contribution
from backend.app.models.participant import Participant

logger = logging.getLogger(__name__)


def _to_record(row: Contribution) -> records.Contribution:
    return records.Contribution(
        id=row.id,
        participant_id=row.participant_id,
        amount=row.amount,
        month=row.month,
        notes=row.notes,
        created_at=row.created_at,
    )


def create_contribution(data: dict, session: Session) -> Contribution:
    """
    Records a contribution.

    Args:
        data: Validated dict from CreateContributionSchema.
              Keys: participant_id, amount, month (first day of the month),
              and optionally notes.

    Raises:
        AppError(PARTICIPANT_NOT_FOUND, 404)
    """
    participant_id = data["participant_id"]
    if session.get(Participant, participant_id) is None:
        raise AppError(
            ErrorCode.PARTICIPANT_NOT_FOUND,
            f"Participant {participant_id} does not exist.",
            404,
            field="participant_id",
        )

    contribution = Contribution(
        participant_id=participant_id,
        amount=data["amount"],
        month=data["month"].replace(day=1),
        notes=(data.get("notes") or "").strip() or None,
    )
    session.add(contribution)
    session.flush()
    logger.info(
        "Contribution %s of %s recorded for participant %s (%s)",
        contribution.id, contribution.amount, participant_id, f"{contribution.month:%Y-%m}",
    )
    return contribution


def list_contributions(
        session: Session,
        participant_id: int | None = None,
) -> list[Contribution]:
    """Most recent month first; within a month, newest first."""
    stmt = select(Contribution).order_by(
        Contribution.month.desc(),
        Contribution.created_at.desc(),
        Contribution.id.desc(),
    )
    if participant_id is not None:
        stmt = stmt.where(Contribution.participant_id == participant_id)
    return list(session.execute(stmt).scalars().all())


def delete_contribution(contribution_id: int, session: Session) -> None:
    contribution = session.get(Contribution, contribution_id)
    if contribution is None:
        raise AppError(
            ErrorCode.CONTRIBUTION_NOT_FOUND,
            f"Contribution {contribution_id} does not exist.",
            404,
        )
    session.delete(contribution)
    session.flush()
    logger.info("Contribution %s deleted", contribution_id)


def contribution_totals(session: Session) -> list[records.ContributionTotal]:
    """Total contributed per participant, largest first."""
    rows = list_contributions(session)
    participants = {
        row.participant.id: records.Participant(
            id=row.participant.id,
            name=row.participant.name,
            type=row.participant.type,
            children=row.participant.children,
        )
        for row in rows
    }
    return total_contributions([_to_record(r) for r in rows], participants)


def contributions_by_month(session: Session) -> list[records.ContributionMonth]:
    """Contributions grouped by "YYYY-MM", most recent month first."""
    return group_contributions_by_month(_to_record(r) for r in list_contributions(session))
