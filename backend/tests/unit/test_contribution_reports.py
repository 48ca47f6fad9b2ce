"""
tests/unit/test_contribution_reports.py — Unit tests for the contribution
summaries in ledger.reports.

What this file proves:
  - Totals are summed per participant, largest first, ties by name
  - Contributions of unknown participants are left out of the totals
  - Month grouping buckets by "YYYY-MM", most recent month first, and keeps
    the input order inside a month
  - A Contribution record always points at the first day of its month
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from backend.app.ledger.records import Contribution, Participant
from backend.app.ledger.reports import group_contributions_by_month, total_contributions


ANA = Participant(1, "Ana")
BIA = Participant(2, "bia")
CAIO = Participant(3, "Caio")
PARTICIPANTS = {p.id: p for p in (ANA, BIA, CAIO)}


def _contribution(cid: int, pid: int, amount: str, month: str) -> Contribution:
    year, mon = (int(part) for part in month.split("-"))
    return Contribution(cid, pid, Decimal(amount), dt.date(year, mon, 1))


# ── total_contributions ────────────────────────────────────────────────────

class TestTotals:

    def test_sums_per_participant_largest_first(self):
        totals = total_contributions(
            [
                _contribution(1, 1, "100.00", "2026-01"),
                _contribution(2, 2, "250.00", "2026-01"),
                _contribution(3, 1, "200.00", "2026-02"),
            ],
            PARTICIPANTS,
        )
        assert [(t.participant.name, t.total) for t in totals] == [
            ("Ana", Decimal("300.00")),
            ("bia", Decimal("250.00")),
        ]

    def test_ties_are_ordered_by_name(self):
        totals = total_contributions(
            [
                _contribution(1, 3, "50.00", "2026-01"),
                _contribution(2, 2, "50.00", "2026-01"),
                _contribution(3, 1, "50.00", "2026-01"),
            ],
            PARTICIPANTS,
        )
        assert [t.participant.name for t in totals] == ["Ana", "bia", "Caio"]

    def test_unknown_participant_is_left_out(self):
        totals = total_contributions([_contribution(1, 99, "10.00", "2026-01")], PARTICIPANTS)
        assert totals == []

    def test_no_contributions(self):
        assert total_contributions([], PARTICIPANTS) == []


# ── group_contributions_by_month ───────────────────────────────────────────

def test_groups_by_month_newest_first():
    march_a = _contribution(3, 1, "30.00", "2026-03")
    jan = _contribution(1, 2, "10.00", "2026-01")
    march_b = _contribution(2, 3, "20.00", "2026-03")

    months = group_contributions_by_month([march_a, jan, march_b])

    assert [(m.month, m.total) for m in months] == [
        ("2026-03", Decimal("50.00")),
        ("2026-01", Decimal("10.00")),
    ]
    assert months[0].contributions == (march_a, march_b)


def test_months_across_years():
    months = group_contributions_by_month([
        _contribution(1, 1, "10.00", "2025-12"),
        _contribution(2, 1, "10.00", "2026-01"),
    ])
    assert [m.month for m in months] == ["2026-01", "2025-12"]


# ── Contribution record ────────────────────────────────────────────────────

def test_month_is_normalised_to_first_day():
    contribution = Contribution(1, 1, "12.50", dt.date(2026, 2, 17))
    assert contribution.month == dt.date(2026, 2, 1)
    assert contribution.amount == Decimal("12.50")


@pytest.mark.parametrize("amount", ["0", "-5.00"])
def test_non_positive_amount_rejected(amount):
    with pytest.raises(ValueError):
        Contribution(1, 1, amount, dt.date(2026, 2, 1))
