"""
ledger/accumulator.py — Balance Accumulator.

Folds participants, expenses, shares and payments into one ParticipantBalance
per participant. This is the single place where balances are computed; do not
reimplement the formula elsewhere.

Algorithm:
  1. Zeroed running totals for every participant on the roster.
  2. Credit each expense's payer with the full amount they fronted.
  3. Debit each share holder with their share (raw owes).
  4. Apply payments as corrections: the payer's raw owes drops by the amount,
     the receiver's raw owed-by-others drops by the amount.
  5. Final pass: net = paid - raw owes + owed correction,
     owed = max(0, net), owes = max(0, -net), balance = owed - owes.

Referential gaps are skipped without raising: an expense whose payer is not
on the roster (or missing) contributes nothing, and neither do its shares.
A payment is only applied when both parties are on the roster. Reporting
what was skipped is the caller's job (see ledger/integrity.py).

With every reference resolvable, sum(balance) equals the sum over expenses of
(amount - sum of its shares): zero when shares add up, the rounding drift
otherwise. Payments never change the sum.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from backend.app.ledger.records import (
    ZERO,
    Expense,
    ExpenseShare,
    Participant,
    ParticipantBalance,
    Payment,
)


class _RunningTotals:
    __slots__ = ("paid", "raw_owes", "owed_correction")

    def __init__(self) -> None:
        self.paid = ZERO
        self.raw_owes = ZERO
        self.owed_correction = ZERO


def billable_expense_ids(
        expenses: Iterable[Expense],
        participant_ids: Iterable[int],
) -> set[int]:
    """Ids of expenses whose payer is on the roster."""
    roster = set(participant_ids)
    return {
        e.id for e in expenses
        if e.payer_id is not None and e.payer_id in roster
    }


def compute_balances(
        participants: Iterable[Participant],
        expenses: Iterable[Expense],
        shares: Iterable[ExpenseShare],
        payments: Iterable[Payment],
) -> list[ParticipantBalance]:
    """
    Returns one ParticipantBalance per participant, sorted by display name
    (case- and accent-insensitive).

    Pure function: the inputs are only read, never mutated.
    """
    participants = list(participants)
    expenses = list(expenses)
    totals: dict[int, _RunningTotals] = {p.id: _RunningTotals() for p in participants}

    # Step 1: credit payers.
    billable = billable_expense_ids(expenses, totals.keys())
    for expense in expenses:
        if expense.id in billable:
            totals[expense.payer_id].paid += expense.amount

    # Step 2: debit share holders, only for expenses that credited someone.
    for share in shares:
        if share.expense_id not in billable:
            continue
        running = totals.get(share.participant_id)
        if running is not None:
            running.raw_owes += share.amount

    # Step 3: payments are corrections on both sides.
    for payment in payments:
        payer = totals.get(payment.payer_id)
        receiver = totals.get(payment.receiver_id)
        if payer is None or receiver is None:
            continue
        payer.raw_owes -= payment.amount
        receiver.owed_correction -= payment.amount

    # Step 4: final pass.
    balances = [
        _finalise(participant, totals[participant.id])
        for participant in participants
    ]
    balances.sort(key=lambda b: b.participant.sort_key)
    return balances


def _finalise(participant: Participant, running: _RunningTotals) -> ParticipantBalance:
    net: Decimal = running.paid - running.raw_owes + running.owed_correction
    owed = max(ZERO, net)
    owes = max(ZERO, -net)
    return ParticipantBalance(
        participant=participant,
        paid=running.paid,
        owed=owed,
        owes=owes,
        balance=owed - owes,
    )
