"""
services/expense_service.py — Expense business logic.

Rules enforced here (the schema cannot check them, they need the roster):
  PAYER_NOT_PARTICIPANT (422)  — the payer must be on the event's roster
  SHARE_NOT_PARTICIPANT (422)  — every selected participant must be on the roster
  NO_ADULT_UNITS (422)         — raised by the division strategy, before any write
  INVALID_DIVISION_TYPE (400)  — no strategy registered for the requested type

Share computation:
  Shares are never sent by the client. The division strategy for the
  expense's division_type computes them from the selected participants
  (ledger/division.py); sum(shares) == amount holds for every expense
  created here.

Atomicity:
  The expense row and its share rows are written together by the data
  source; a failure leaves nothing behind and surfaces DATA_SOURCE_ERROR (503).

Layer rules (GUIDE Rule 3):
  - No Flask imports. Receives a LedgerDataSource, returns ledger records.
  - Commits are the route's responsibility.
"""

from __future__ import annotations

import datetime as dt
import logging

from backend.app.errors import AppError, ErrorCode, data_source_errors
from backend.app.ledger.division import compute_shares
from backend.app.ledger.records import Category, DivisionType, Expense, ExpenseShare
from backend.app.services.data_source import LedgerDataSource, require_event

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _get_expense_or_404(expense_id: int, source: LedgerDataSource) -> Expense:
    """Returns the Expense record or raises EXPENSE_NOT_FOUND (404)."""
    with data_source_errors("load the expense"):
        expense = source.get_expense(expense_id)
    if expense is None:
        raise AppError(
            ErrorCode.EXPENSE_NOT_FOUND,
            f"Expense {expense_id} does not exist.",
            404,
        )
    return expense


# ── Public service functions ───────────────────────────────────────────────

def create_expense(
        event_id: int,
        data: dict,
        source: LedgerDataSource,
) -> tuple[Expense, list[ExpenseShare]]:
    """
    Records a new expense and its shares for an event.

    Args:
        event_id: The event this expense belongs to.
        data:     Validated dict from CreateExpenseSchema. Keys: description,
                  amount, payer_id, and optionally category, date,
                  division_type, participant_ids. Without participant_ids the
                  expense is split over the whole roster.

    Returns:
        (Expense, shares) as written.
    """
    require_event(event_id, source)

    with data_source_errors("load participants"):
        roster = {p.id: p for p in source.list_participants(event_id)}

    payer_id: int = data["payer_id"]
    if payer_id not in roster:
        raise AppError(
            ErrorCode.PAYER_NOT_PARTICIPANT,
            f"Participant {payer_id} is not part of event {event_id}.",
            422,
            field="payer_id",
        )

    selected_ids = data.get("participant_ids")
    if selected_ids is None:
        selected_ids = list(roster)
    for participant_id in selected_ids:
        if participant_id not in roster:
            raise AppError(
                ErrorCode.SHARE_NOT_PARTICIPANT,
                f"Participant {participant_id} is not part of event {event_id}.",
                422,
                field="participant_ids",
            )

    division_type = data.get("division_type") or DivisionType.EQUAL
    share_rows = compute_shares(
        division_type,
        data["amount"],
        [roster[pid] for pid in selected_ids],
        payer_id=payer_id,
    )

    expense_data = {
        "description": data["description"].strip(),
        "amount": data["amount"],
        "payer_id": payer_id,
        "category": Category(data.get("category") or Category.OTHER).value,
        "date": data.get("date") or dt.date.today(),
        "division_type": DivisionType(division_type),
    }

    with data_source_errors("save the expense"):
        expense = source.create_expense(event_id, expense_data, share_rows)

    logger.info(
        "Expense %s (%s) recorded for event %s, split over %d participant(s)",
        expense.id, expense.amount, event_id, len(share_rows),
    )
    shares = [
        ExpenseShare(
            expense_id=expense.id,
            participant_id=row["participant_id"],
            amount=row["amount"],
        )
        for row in share_rows
    ]
    return expense, shares


def list_expenses(event_id: int, source: LedgerDataSource) -> list[Expense]:
    """Expenses of an event, newest date first (ties: most recently created first)."""
    require_event(event_id, source)
    with data_source_errors("load expenses"):
        expenses = source.list_expenses(event_id)
    return sorted(
        expenses,
        key=lambda e: (e.date or dt.date.min, e.id),
        reverse=True,
    )


def get_expense(
        expense_id: int,
        source: LedgerDataSource,
) -> tuple[Expense, list[ExpenseShare]]:
    """Returns the expense with its shares."""
    expense = _get_expense_or_404(expense_id, source)
    with data_source_errors("load expense shares"):
        shares = source.list_shares_for_expense(expense_id)
    return expense, shares


def delete_expense(expense_id: int, source: LedgerDataSource) -> None:
    """
    Deletes an expense together with its shares. This is a hard delete:
    the next recompute no longer sees the expense at all.
    """
    with data_source_errors("delete the expense"):
        deleted = source.delete_expense(expense_id)
    if not deleted:
        raise AppError(
            ErrorCode.EXPENSE_NOT_FOUND,
            f"Expense {expense_id} does not exist.",
            404,
        )
    logger.info("Expense %s deleted", expense_id)
