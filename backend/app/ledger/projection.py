"""
ledger/projection.py — Presentation Projection.

Shapes reconciled lines and raw obligations for display:

  project_by_ower()     "payments this ower must make", one group per ower,
                        one entry per receiver. Groups sorted by ower name.
  detail_by_expense()   flat per-expense breakdown, one row per obligation.
"""

from __future__ import annotations

from typing import Iterable

from backend.app.ledger.records import (
    DetailedPayment,
    PairwiseObligation,
    Participant,
    PaymentInstruction,
    PaymentsByPayer,
    SettlementLine,
)


def project_by_ower(
        settlement_lines: Iterable[SettlementLine],
        participants: Iterable[Participant],
) -> list[PaymentsByPayer]:
    """
    Groups settlement lines by ower.

    Within a group, entries keep the order of the incoming lines. A repeated
    (ower, payer) pair is merged into one entry: amounts are summed and the
    entry counts as paid only if every merged line was. Lines naming someone
    not in `participants` are dropped; owers with no entries are omitted.
    """
    by_id = {p.id: p for p in participants}

    # ower_id -> {payer_id: [amount, is_paid]}, both levels insertion-ordered
    grouped: dict[int, dict[int, list]] = {}
    for line in settlement_lines:
        if line.ower_id not in by_id or line.payer_id not in by_id:
            continue
        entries = grouped.setdefault(line.ower_id, {})
        entry = entries.get(line.payer_id)
        if entry is None:
            entries[line.payer_id] = [line.amount, line.is_paid]
        else:
            entry[0] += line.amount
            entry[1] = entry[1] and line.is_paid

    result = [
        PaymentsByPayer(
            payer=by_id[ower_id],
            payments=tuple(
                PaymentInstruction(receiver=by_id[payer_id], amount=amount, is_paid=is_paid)
                for payer_id, (amount, is_paid) in entries.items()
            ),
        )
        for ower_id, entries in grouped.items()
        if entries
    ]
    result.sort(key=lambda group: group.payer.sort_key)
    return result


def detail_by_expense(
        obligations: Iterable[PairwiseObligation],
        participants: Iterable[Participant],
) -> list[DetailedPayment]:
    """One DetailedPayment per obligation whose two parties are known."""
    by_id = {p.id: p for p in participants}
    details: list[DetailedPayment] = []
    for obligation in obligations:
        ower = by_id.get(obligation.ower_id)
        payer = by_id.get(obligation.payer_id)
        if ower is None or payer is None:
            continue
        details.append(DetailedPayment(
            from_id=ower.id,
            from_name=ower.name,
            to_id=payer.id,
            to_name=payer.name,
            amount=obligation.amount,
            expense_id=obligation.expense_id,
            expense_description=obligation.expense_description,
        ))
    return details
