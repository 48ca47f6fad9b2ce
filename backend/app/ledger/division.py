"""
ledger/division.py — Turning an expense amount into per-participant shares.

Equal split by adult-unit:
  - An individual counts as 1 adult-unit, a couple as 2.
  - per_unit = amount / total_units (full Decimal precision).
  - Each share = per_unit * units, rounded half-up to the cent.
  - Whatever cents rounding left over (positive or negative) are handed out
    one cent per share, starting with the payer's share (or the first
    selected participant when the payer is not among them) and continuing
    in selection order. No share goes below 0.00 and sum(shares) == amount.

Example: 400.00 over two couples and two individuals (6 units):
  per_unit = 66.666..., couples 133.33 each, individuals 66.67 each, sum 400.00.

Zero selected adult-units is rejected here, before anything is written
(NO_ADULT_UNITS, 422).

DIVISION_STRATEGIES maps each DivisionType to its function. New division
types register there; the schema only accepts types present in the map.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Sequence

from backend.app.errors import AppError, ErrorCode
from backend.app.ledger.records import CENT, DivisionType, Participant, to_amount


ShareRows = list[dict]


def total_adult_units(participants: Sequence[Participant]) -> int:
    return sum(p.adult_units for p in participants)


def _spread_remainder(rows: ShareRows, remainder: Decimal, payer_id: int | None) -> None:
    """
    Moves the rounding remainder one cent at a time, starting with the
    payer's share (or the first share) and continuing in selection order.

    A share is never taken below zero: when the remainder is negative,
    shares already at 0.00 are passed over.
    """
    first = next((r for r in rows if r["participant_id"] == payer_id), rows[0])
    order = [first, *(r for r in rows if r is not first)]
    step = CENT if remainder > 0 else -CENT

    while remainder:
        moved = False
        for row in order:
            if not remainder:
                break
            if step < 0 and row["amount"] <= 0:
                continue
            row["amount"] += step
            remainder -= step
            moved = True
        if not moved:
            break


def split_by_adult_units(
        amount: Decimal,
        participants: Sequence[Participant],
        payer_id: int | None = None,
) -> ShareRows:
    """
    Equal-by-adult-unit split.

    Args:
        amount:       The full expense amount. Must be positive.
        participants: The selected participants, in the order shares should
                      be listed.
        payer_id:     Receives the rounding remainder when selected.

    Returns:
        List of {"participant_id": int, "amount": Decimal} dicts.

    Raises:
        AppError(NO_ADULT_UNITS, 422) when nobody is selected.
    """
    amount = to_amount(amount)
    units = total_adult_units(participants)
    if units <= 0:
        raise AppError(
            ErrorCode.NO_ADULT_UNITS,
            "Select at least one participant to split the expense between.",
            422,
            field="participant_ids",
        )

    per_unit = amount / Decimal(units)
    rows: ShareRows = [
        {
            "participant_id": p.id,
            "amount": (per_unit * p.adult_units).quantize(CENT, rounding=ROUND_HALF_UP),
        }
        for p in participants
    ]

    remainder = amount - sum(r["amount"] for r in rows)
    if remainder:
        _spread_remainder(rows, remainder, payer_id)

    computed_sum = sum(r["amount"] for r in rows)
    if computed_sum != amount:
        raise AppError(
            ErrorCode.INTERNAL_ERROR,
            f"Equal split produced sum {computed_sum} for amount {amount}. "
            f"This is a bug, please report it.",
            500,
        )
    return rows


DIVISION_STRATEGIES: dict[DivisionType, Callable[..., ShareRows]] = {
    DivisionType.EQUAL: split_by_adult_units,
}


def compute_shares(
        division_type: DivisionType | str,
        amount: Decimal,
        participants: Sequence[Participant],
        payer_id: int | None = None,
) -> ShareRows:
    """Dispatches to the strategy registered for `division_type`."""
    try:
        strategy = DIVISION_STRATEGIES[DivisionType(division_type)]
    except (KeyError, ValueError):
        raise AppError(
            ErrorCode.INVALID_DIVISION_TYPE,
            f"Division type {division_type!r} is not supported.",
            400,
            field="division_type",
        )
    return strategy(amount, participants, payer_id)
