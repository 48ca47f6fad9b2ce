"""
ledger/reconciliation.py — Payment Reconciliation.

Groups obligations by (ower, payer) and decides, per pair, whether the line is
paid. Payments are matched to pairs by direction only (ower -> payer); a
payment never targets a specific expense.

Two policies:

  PRESENCE  any payment ower -> payer marks the line paid, whatever its
            amount. Paying 50 of a 200 debt shows the line as paid.
  AMOUNT    the line is paid once the payments ower -> payer add up to at
            least the line amount.

PRESENCE is the default. Both policies report the same paid_amount, so
SettlementLine.outstanding is meaningful either way.
"""

from __future__ import annotations

import enum
from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from backend.app.ledger.records import ZERO, PairwiseObligation, Payment, SettlementLine


class ReconciliationPolicy(str, enum.Enum):
    PRESENCE = "presence"
    AMOUNT   = "amount"


Pair = tuple[int, int]


def payments_by_pair(payments: Iterable[Payment]) -> dict[Pair, Decimal]:
    """Sum of payment amounts per (payer, receiver) direction."""
    totals: dict[Pair, Decimal] = defaultdict(lambda: ZERO)
    for payment in payments:
        totals[(payment.payer_id, payment.receiver_id)] += payment.amount
    return dict(totals)


def reconcile(
        obligations: Iterable[PairwiseObligation],
        payments: Iterable[Payment],
        policy: ReconciliationPolicy | str = ReconciliationPolicy.PRESENCE,
) -> list[SettlementLine]:
    """
    Returns one SettlementLine per (ower, payer) pair with a non-zero total,
    in the order each pair first appears among the obligations.
    """
    policy = ReconciliationPolicy(policy)
    paid = payments_by_pair(payments)

    owed: dict[Pair, Decimal] = {}
    for obligation in obligations:
        pair = (obligation.ower_id, obligation.payer_id)
        owed[pair] = owed.get(pair, ZERO) + obligation.amount

    lines: list[SettlementLine] = []
    for pair, amount in owed.items():
        if amount == 0:
            continue
        paid_amount = paid.get(pair, ZERO)
        if policy is ReconciliationPolicy.PRESENCE:
            is_paid = pair in paid
        else:
            is_paid = paid_amount >= amount
        lines.append(SettlementLine(
            ower_id=pair[0],
            payer_id=pair[1],
            amount=amount,
            is_paid=is_paid,
            paid_amount=paid_amount,
        ))
    return lines


def outstanding_between(
        obligations: Iterable[PairwiseObligation],
        payments: Iterable[Payment],
        ower_id: int,
        payer_id: int,
) -> Decimal:
    """
    Pairwise debt still open from ower_id to payer_id, net of the reverse
    direction. Never negative.
    """
    obligations = list(obligations)
    payments = list(payments)
    forward = sum(
        (o.amount for o in obligations if o.ower_id == ower_id and o.payer_id == payer_id),
        ZERO,
    )
    backward = sum(
        (o.amount for o in obligations if o.ower_id == payer_id and o.payer_id == ower_id),
        ZERO,
    )
    paid = payments_by_pair(payments)
    net = (
        forward
        - backward
        - paid.get((ower_id, payer_id), ZERO)
        + paid.get((payer_id, ower_id), ZERO)
    )
    return max(ZERO, net)
