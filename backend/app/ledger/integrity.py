"""
ledger/integrity.py — Checks that never block a computation.

The core skips records it cannot resolve and tolerates rounding drift. The
functions here report what happened so the caller can log it and attach
warnings to the response.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from backend.app.ledger.accumulator import billable_expense_ids
from backend.app.ledger.records import (
    ZERO,
    Expense,
    ExpenseShare,
    LedgerSnapshot,
    ParticipantBalance,
)


@dataclass(frozen=True)
class SkippedRecord:
    kind: str        # "expense" | "share" | "payment"
    record_id: object
    reason: str


@dataclass(frozen=True)
class ShareDrift:
    expense_id: int
    amount: Decimal
    shares_total: Decimal

    @property
    def drift(self) -> Decimal:
        return self.amount - self.shares_total


def find_unresolved(snapshot: LedgerSnapshot) -> list[SkippedRecord]:
    """Records the accumulator and deriver leave out, with the reason."""
    roster = snapshot.participant_ids
    known_expenses = {e.id for e in snapshot.expenses}
    billable = billable_expense_ids(snapshot.expenses, roster)
    skipped: list[SkippedRecord] = []

    for expense in snapshot.expenses:
        if expense.id in billable:
            continue
        reason = (
            "expense has no payer" if expense.payer_id is None
            else f"payer {expense.payer_id} is not a participant of this event"
        )
        skipped.append(SkippedRecord("expense", expense.id, reason))

    for share in snapshot.shares:
        if share.expense_id not in known_expenses:
            reason = f"expense {share.expense_id} is not part of this event"
        elif share.expense_id not in billable:
            reason = f"expense {share.expense_id} was skipped"
        elif share.participant_id not in roster:
            reason = f"participant {share.participant_id} is not part of this event"
        else:
            continue
        skipped.append(SkippedRecord(
            "share", (share.expense_id, share.participant_id), reason,
        ))

    for payment in snapshot.payments:
        missing = [
            pid for pid in (payment.payer_id, payment.receiver_id)
            if pid not in roster
        ]
        if missing:
            skipped.append(SkippedRecord(
                "payment",
                payment.id,
                f"participant(s) {', '.join(str(m) for m in missing)} not part of this event",
            ))

    return skipped


def find_rounding_drift(
        expenses: Iterable[Expense],
        shares: Iterable[ExpenseShare],
        tolerance: Decimal,
) -> list[ShareDrift]:
    """Expenses whose shares differ from their amount by more than `tolerance`."""
    shares_total: dict[int, Decimal] = {}
    for share in shares:
        shares_total[share.expense_id] = shares_total.get(share.expense_id, ZERO) + share.amount

    drifts: list[ShareDrift] = []
    for expense in expenses:
        total = shares_total.get(expense.id, ZERO)
        if abs(expense.amount - total) > tolerance:
            drifts.append(ShareDrift(expense.id, expense.amount, total))
    return drifts


def is_conserved(balances: Iterable[ParticipantBalance], tolerance: Decimal) -> bool:
    """True when sum(balance) stays within `tolerance` per participant."""
    balances = list(balances)
    total = sum((b.balance for b in balances), ZERO)
    return abs(total) <= tolerance * max(len(balances), 1)
