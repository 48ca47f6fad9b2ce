"""
tests/unit/test_integrity_checks.py — Unit tests for ledger.integrity and the
validation done by the ledger record constructors.

What this file proves:
  - find_unresolved reports exactly the records the accumulator skips
  - find_rounding_drift only reports drift beyond the tolerance
  - is_conserved scales its tolerance with the number of participants
  - Records reject missing or negative amounts and coerce numbers to Decimal
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from backend.app.ledger.accumulator import compute_balances
from backend.app.ledger.integrity import (
    find_rounding_drift,
    find_unresolved,
    is_conserved,
)
from backend.app.ledger.records import (
    CENT,
    Expense,
    ExpenseShare,
    LedgerSnapshot,
    Participant,
    ParticipantBalance,
    ParticipantType,
    Payment,
    name_sort_key,
    to_amount,
)


ALICE = Participant(1, "Alice")
BOB = Participant(2, "Bob")


# ── find_unresolved ────────────────────────────────────────────────────────

class TestFindUnresolved:

    def test_clean_snapshot_reports_nothing(self):
        snapshot = LedgerSnapshot(
            participants=[ALICE, BOB],
            expenses=[Expense(1, "Lunch", Decimal("20.00"), payer_id=1)],
            shares=[ExpenseShare(1, 1, Decimal("10.00")), ExpenseShare(1, 2, Decimal("10.00"))],
            payments=[Payment(1, payer_id=2, receiver_id=1, amount=Decimal("10.00"))],
        )
        assert find_unresolved(snapshot) == []

    def test_reports_each_kind(self):
        snapshot = LedgerSnapshot(
            participants=[ALICE, BOB],
            expenses=[
                Expense(1, "No payer", Decimal("20.00"), payer_id=None),
                Expense(2, "Stranger paid", Decimal("20.00"), payer_id=9),
                Expense(3, "Fine", Decimal("20.00"), payer_id=1),
            ],
            shares=[
                ExpenseShare(1, 2, Decimal("20.00")),
                ExpenseShare(3, 7, Decimal("20.00")),
                ExpenseShare(5, 1, Decimal("1.00")),
            ],
            payments=[Payment(1, payer_id=2, receiver_id=8, amount=Decimal("5.00"))],
        )
        skipped = find_unresolved(snapshot)

        assert [(s.kind, s.record_id) for s in skipped] == [
            ("expense", 1),
            ("expense", 2),
            ("share", (1, 2)),
            ("share", (3, 7)),
            ("share", (5, 1)),
            ("payment", 1),
        ]
        assert "no payer" in skipped[0].reason
        assert "8" in skipped[-1].reason


# ── find_rounding_drift ────────────────────────────────────────────────────

class TestRoundingDrift:

    def test_one_cent_is_tolerated(self):
        expenses = [Expense(1, "Snacks", Decimal("10.00"), payer_id=1)]
        shares = [ExpenseShare(1, pid, Decimal("3.33")) for pid in (1, 2, 3)]
        assert find_rounding_drift(expenses, shares, CENT) == []

    def test_larger_drift_is_reported(self):
        expenses = [Expense(1, "Snacks", Decimal("10.00"), payer_id=1)]
        shares = [ExpenseShare(1, 1, Decimal("4.00")), ExpenseShare(1, 2, Decimal("4.00"))]
        [drift] = find_rounding_drift(expenses, shares, CENT)

        assert drift.expense_id == 1
        assert drift.shares_total == Decimal("8.00")
        assert drift.drift == Decimal("2.00")

    def test_expense_without_shares_drifts_by_full_amount(self):
        expenses = [Expense(1, "Lonely", Decimal("5.00"), payer_id=1)]
        [drift] = find_rounding_drift(expenses, [], CENT)
        assert drift.drift == Decimal("5.00")


# ── is_conserved ───────────────────────────────────────────────────────────

def test_is_conserved_on_balanced_ledger():
    balances = compute_balances(
        [ALICE, BOB],
        [Expense(1, "Lunch", Decimal("20.00"), payer_id=1)],
        [ExpenseShare(1, 1, Decimal("10.00")), ExpenseShare(1, 2, Decimal("10.00"))],
        [],
    )
    assert is_conserved(balances, CENT) is True


def test_is_conserved_tolerance_scales_with_participants():
    def _balance(participant, amount):
        amount = Decimal(amount)
        return ParticipantBalance(participant, Decimal("0"), amount, Decimal("0"), amount)

    balances = [_balance(ALICE, "0.02"), _balance(BOB, "0.00")]
    assert is_conserved(balances, CENT) is True
    assert is_conserved(balances[:1], CENT) is False


# ── Record constructors ────────────────────────────────────────────────────

class TestRecords:

    def test_amount_is_coerced_to_decimal(self):
        assert Expense(1, "A", "12.50", payer_id=1).amount == Decimal("12.50")
        assert ExpenseShare(1, 1, 3).amount == Decimal("3")

    def test_float_goes_through_str(self):
        assert to_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [None, True, "abc", "NaN", "Infinity"])
    def test_to_amount_rejects(self, value):
        with pytest.raises(ValueError):
            to_amount(value)

    def test_expense_amount_must_be_positive(self):
        with pytest.raises(ValueError):
            Expense(1, "Free", Decimal("0.00"), payer_id=1)

    def test_share_may_be_zero_but_not_negative(self):
        assert ExpenseShare(1, 1, Decimal("0.00")).amount == Decimal("0.00")
        with pytest.raises(ValueError):
            ExpenseShare(1, 1, Decimal("-1.00"))

    def test_payment_amount_must_be_positive(self):
        with pytest.raises(ValueError):
            Payment(1, payer_id=1, receiver_id=2, amount=Decimal("-5.00"))

    def test_participant_validation(self):
        with pytest.raises(ValueError):
            Participant(1, "   ")
        with pytest.raises(ValueError):
            Participant(1, "Kid", children=-1)
        with pytest.raises(ValueError):
            Participant(1, "Odd", type="triple")

    def test_participant_type_from_string(self):
        couple = Participant(1, "Mia+Leo", type="couple")
        assert couple.type is ParticipantType.COUPLE
        assert couple.adult_units == 2

    def test_records_are_immutable(self):
        with pytest.raises(AttributeError):
            ALICE.name = "Alicia"

    def test_name_sort_key(self):
        assert name_sort_key("Élodie") == name_sort_key("elodie")
