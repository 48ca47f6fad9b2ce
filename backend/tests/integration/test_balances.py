"""
tests/integration/test_balances.py — Integration tests for GET /events/:id/balances.

What this file proves end to end (HTTP → services → ledger → SQLite):
  - The rent scenario: Alice +200, Bob+Carol -200, one unpaid line, then zero
    balances and a paid line after Bob+Carol pay 200
  - Balances add up to zero without payments
  - Two expenses owed to the same payer merge into one instruction but stay
    two rows in the per-expense detail
  - Presence reconciliation: a partial payment already marks the line paid
  - Every request recomputes: a deleted payment reopens the line
"""

from __future__ import annotations

from decimal import Decimal

from backend.tests.integration.conftest import (
    get_balances,
    make_event,
    make_expense,
    make_household,
    make_payment,
)


def _setup(client):
    event = make_event(client)
    alice = make_household(client, event["id"], "Alice")
    couple = make_household(client, event["id"], "Bob+Carol", type="couple")
    return event, alice, couple


def _balance_of(data: dict, participant_id: int) -> dict:
    return next(b for b in data["balances"] if b["participant"]["id"] == participant_id)


# ═══════════════════════════════════════════════════════════════════════════
# Rent scenario
# ═══════════════════════════════════════════════════════════════════════════

class TestRentScenario:

    def test_before_payment(self, client):
        event, alice, couple = _setup(client)
        make_expense(client, event["id"], alice["id"], "300.00", description="Rent")

        body = get_balances(client, event["id"])
        data = body["data"]
        assert body["warnings"] == []

        a, c = _balance_of(data, alice["id"]), _balance_of(data, couple["id"])
        assert (a["paid"], a["owed"], a["owes"], a["balance"]) == ("300.00", "200.00", "0.00", "200.00")
        assert (c["paid"], c["owed"], c["owes"], c["balance"]) == ("0.00", "0.00", "200.00", "-200.00")
        assert data["balance_sum"] == "0.00"

        [line] = data["settlement_lines"]
        assert line["ower_id"] == couple["id"]
        assert line["payer_id"] == alice["id"]
        assert line["amount"] == "200.00"
        assert line["is_paid"] is False

        [group] = data["payments_by_payer"]
        assert group["payer"]["name"] == "Bob+Carol"
        assert group["payments"] == [
            {"receiver": {"id": alice["id"], "name": "Alice"}, "amount": "200.00", "is_paid": False},
        ]

        [detail] = data["detailed_payments"]
        assert (detail["from_name"], detail["to_name"], detail["expense_description"]) == (
            "Bob+Carol", "Alice", "Rent",
        )

    def test_after_payment(self, client):
        event, alice, couple = _setup(client)
        make_expense(client, event["id"], alice["id"], "300.00", description="Rent")
        make_payment(client, event["id"], couple["id"], alice["id"], "200.00")

        data = get_balances(client, event["id"])["data"]
        assert _balance_of(data, alice["id"])["balance"] == "0.00"
        assert _balance_of(data, couple["id"])["balance"] == "0.00"
        assert data["settlement_lines"][0]["is_paid"] is True
        assert data["outstanding_total"] == "0.00"
        # per-expense detail does not know about payments
        assert len(data["detailed_payments"]) == 1


# ═══════════════════════════════════════════════════════════════════════════
# Other properties
# ═══════════════════════════════════════════════════════════════════════════

def test_conservation_with_many_expenses(client):
    event, alice, couple = _setup(client)
    dave = make_household(client, event["id"], "Dave")
    make_expense(client, event["id"], alice["id"], "100.00")
    make_expense(client, event["id"], couple["id"], "77.77")
    make_expense(client, event["id"], dave["id"], "10.00", participant_ids=[alice["id"], dave["id"]])

    data = get_balances(client, event["id"])["data"]
    assert sum(Decimal(b["balance"]) for b in data["balances"]) == Decimal("0.00")


def test_merge_per_pair_and_detail_per_expense(client):
    event, alice, couple = _setup(client)
    ben = make_household(client, event["id"], "Ben")
    make_expense(client, event["id"], ben["id"], "100.00", description="Tent",
                 participant_ids=[alice["id"], ben["id"]])
    make_expense(client, event["id"], ben["id"], "60.00", description="Costumes",
                 participant_ids=[alice["id"], ben["id"]])

    data = get_balances(client, event["id"])["data"]

    [group] = data["payments_by_payer"]
    assert group["payer"]["name"] == "Alice"
    assert group["payments"] == [
        {"receiver": {"id": ben["id"], "name": "Ben"}, "amount": "80.00", "is_paid": False},
    ]
    assert sorted(d["amount"] for d in data["detailed_payments"]) == ["30.00", "50.00"]


def test_partial_payment_marks_line_paid(client):
    event, alice, couple = _setup(client)
    make_expense(client, event["id"], alice["id"], "300.00")
    make_payment(client, event["id"], couple["id"], alice["id"], "50.00")

    [line] = get_balances(client, event["id"])["data"]["settlement_lines"]
    assert line["is_paid"] is True
    assert line["paid_amount"] == "50.00"
    assert line["outstanding"] == "150.00"


def test_deleting_payment_reopens_line(client):
    event, alice, couple = _setup(client)
    make_expense(client, event["id"], alice["id"], "300.00")
    payment = make_payment(client, event["id"], couple["id"], alice["id"], "200.00")

    client.delete(f"/api/v1/payments/{payment.get_json()['data']['id']}")

    data = get_balances(client, event["id"])["data"]
    assert data["settlement_lines"][0]["is_paid"] is False
    assert _balance_of(data, couple["id"])["balance"] == "-200.00"


def test_empty_event(client):
    event = make_event(client)
    data = get_balances(client, event["id"])["data"]
    assert data["balances"] == []
    assert data["settlement_lines"] == []
    assert data["balance_sum"] == "0.00"


def test_unknown_event(client):
    resp = client.get("/api/v1/events/9999/balances")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "EVENT_NOT_FOUND"
