"""
ledger/obligations.py — Pairwise Obligation Deriver.

Every share held by someone other than the expense's payer becomes one
obligation: the share holder (ower) pays the payer directly. There is no
netting across expenses or across people: if Bob owes Alice for two expenses,
two obligations come out, each tagged with its own expense. Merging per pair
happens in reconciliation.

Payments are deliberately ignored here. The per-expense detail therefore keeps
showing an expense as owed even after the pair's aggregate debt was paid.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Collection, Iterable

from backend.app.ledger.records import Expense, ExpenseShare, PairwiseObligation


def derive_obligations(
        expenses: Iterable[Expense],
        shares: Iterable[ExpenseShare],
        participant_ids: Collection[int] | None = None,
) -> list[PairwiseObligation]:
    """
    Returns obligations in expense order, then share order.

    Args:
        participant_ids: Optional roster. When given, expenses whose payer is
                         not on it are skipped, and so are shares of people
                         not on it.
    """
    shares_by_expense: dict[int, list[ExpenseShare]] = defaultdict(list)
    for share in shares:
        shares_by_expense[share.expense_id].append(share)

    roster = set(participant_ids) if participant_ids is not None else None

    obligations: list[PairwiseObligation] = []
    for expense in expenses:
        payer_id = expense.payer_id
        if payer_id is None or (roster is not None and payer_id not in roster):
            continue

        for share in shares_by_expense.get(expense.id, ()):
            if share.participant_id == payer_id:
                continue  # nobody owes themself
            if roster is not None and share.participant_id not in roster:
                continue
            obligations.append(PairwiseObligation(
                ower_id=share.participant_id,
                payer_id=payer_id,
                amount=share.amount,
                expense_id=expense.id,
                expense_description=expense.description,
            ))

    return obligations
