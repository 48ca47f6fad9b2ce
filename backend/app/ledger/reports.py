"""
ledger/reports.py — Expense totals per category and contribution summaries.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from backend.app.ledger.records import (
    CENT,
    ZERO,
    Category,
    CategorySummary,
    Contribution,
    ContributionMonth,
    ContributionTotal,
    Expense,
    Participant,
)


def summarize_by_category(expenses: Iterable[Expense]) -> list[CategorySummary]:
    """
    Total and share of the grand total per category, largest first.

    Expenses without a category are counted under "other". Percentages are
    rounded to two decimals, so they may not add up to exactly 100.
    Ties on total are broken by category name.
    """
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        category = expense.category or Category.OTHER.value
        totals[category] = totals.get(category, ZERO) + expense.amount

    grand_total = sum(totals.values(), ZERO)
    if grand_total == 0:
        return []

    summary = [
        CategorySummary(
            category=category,
            total=total,
            percentage=(total * 100 / grand_total).quantize(CENT, rounding=ROUND_HALF_UP),
        )
        for category, total in totals.items()
    ]
    summary.sort(key=lambda s: (-s.total, s.category))
    return summary


def total_contributions(
        contributions: Iterable[Contribution],
        participants: Mapping[int, Participant],
) -> list[ContributionTotal]:
    """
    Sum of contributions per participant, largest first, ties by name.

    Contributions of participants missing from `participants` are left out.
    """
    totals: dict[int, Decimal] = {}
    for contribution in contributions:
        if contribution.participant_id not in participants:
            continue
        totals[contribution.participant_id] = (
            totals.get(contribution.participant_id, ZERO) + contribution.amount
        )

    result = [
        ContributionTotal(participant=participants[pid], total=total)
        for pid, total in totals.items()
    ]
    result.sort(key=lambda t: (-t.total, t.participant.sort_key))
    return result


def group_contributions_by_month(
        contributions: Iterable[Contribution],
) -> list[ContributionMonth]:
    """Contributions bucketed by "YYYY-MM", most recent month first."""
    buckets: dict[str, list[Contribution]] = {}
    for contribution in contributions:
        buckets.setdefault(contribution.month.strftime("%Y-%m"), []).append(contribution)

    return [
        ContributionMonth(
            month=month,
            total=sum((c.amount for c in items), ZERO),
            contributions=tuple(items),
        )
        for month, items in sorted(buckets.items(), reverse=True)
    ]
