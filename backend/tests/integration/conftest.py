"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - The app is created once per session using create_app("testing").
    TestingConfig points at TEST_DATABASE_URL, or an in-memory SQLite
    database when it is unset. Enumerated columns are plain VARCHARs, so the
    same models run on both.
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated.

Helper functions (not fixtures) are provided for common operations:
  - make_event(client, ...)        → event dict
  - make_participant(client, ...)  → participant dict
  - add_to_event(client, ...)      → HTTP response
  - make_household(client, ...)    → participant dict, already on the roster
  - make_expense(client, ...)      → HTTP response
  - make_payment(client, ...)      → HTTP response
  - make_contribution(client, ...) → HTTP response

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test without fixture parameterization overhead.
"""

from __future__ import annotations

import pytest
from sqlalchemy import text

from backend.app import create_app
from backend.app.extensions import db as _db


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """
    Creates the Flask application in 'testing' mode once for the entire test session.
    Tables are created up front and dropped at teardown.
    """
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """
    Deletes all rows after every test in FK-safe order:
      contributions, payments and expense_shares first, then expenses and roster rows
      before events and participants.
    """
    yield  # run the test

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test

        with _db.engine.connect() as conn:
            conn.execute(text("DELETE FROM contributions"))
            conn.execute(text("DELETE FROM payments"))
            conn.execute(text("DELETE FROM expense_shares"))
            conn.execute(text("DELETE FROM expenses"))
            conn.execute(text("DELETE FROM event_participants"))
            conn.execute(text("DELETE FROM participants"))
            conn.execute(text("DELETE FROM events"))
            conn.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def make_event(client, name: str = "Carnival 2026", **extra) -> dict:
    """Creates an event and returns the event data dict."""
    resp = client.post("/api/v1/events", json={"name": name, **extra})
    assert resp.status_code == 201, f"make_event failed: {resp.get_json()}"
    return resp.get_json()["data"]


def make_participant(
    client,
    name: str,
    type: str = "individual",
    children: int = 0,
) -> dict:
    """Creates a participant (not yet on any roster) and returns its data dict."""
    resp = client.post(
        "/api/v1/participants",
        json={"name": name, "type": type, "children": children},
    )
    assert resp.status_code == 201, f"make_participant failed: {resp.get_json()}"
    return resp.get_json()["data"]


def add_to_event(client, event_id: int, participant_id: int):
    """Puts a participant on an event's roster. Returns the HTTP response."""
    return client.post(
        f"/api/v1/events/{event_id}/participants",
        json={"participant_id": participant_id},
    )


def make_household(client, event_id: int, name: str, type: str = "individual") -> dict:
    """Creates a participant and adds it to the event's roster."""
    participant = make_participant(client, name, type)
    resp = add_to_event(client, event_id, participant["id"])
    assert resp.status_code == 201, f"add_to_event failed: {resp.get_json()}"
    return participant


def make_expense(
    client,
    event_id: int,
    payer_id: int,
    amount: str,
    description: str = "Test expense",
    participant_ids: list[int] | None = None,
    category: str | None = None,
    date: str | None = None,
):
    """
    Creates an expense. Shares are computed by the server.
    Returns the raw HTTP response (caller asserts status).
    """
    payload: dict = {
        "description": description,
        "amount": amount,
        "payer_id": payer_id,
    }
    if participant_ids is not None:
        payload["participant_ids"] = participant_ids
    if category is not None:
        payload["category"] = category
    if date is not None:
        payload["date"] = date
    return client.post(f"/api/v1/events/{event_id}/expenses", json=payload)


def make_payment(
    client,
    event_id: int,
    payer_id: int,
    receiver_id: int,
    amount: str,
    notes: str | None = None,
):
    """Records a payment. Returns the raw HTTP response."""
    payload: dict = {
        "payer_id": payer_id,
        "receiver_id": receiver_id,
        "amount": amount,
    }
    if notes is not None:
        payload["notes"] = notes
    return client.post(f"/api/v1/events/{event_id}/payments", json=payload)


def get_balances(client, event_id: int) -> dict:
    """GET /events/:id/balances and return the whole envelope."""
    resp = client.get(f"/api/v1/events/{event_id}/balances")
    assert resp.status_code == 200, f"get_balances failed: {resp.get_json()}"
    return resp.get_json()


def make_contribution(
    client,
    participant_id: int,
    amount: str,
    month: str | None = None,
    notes: str | None = None,
):
    """Records a contribution. Returns the raw HTTP response."""
    payload: dict = {"participant_id": participant_id, "amount": amount}
    if month is not None:
        payload["month"] = month
    if notes is not None:
        payload["notes"] = notes
    return client.post("/api/v1/contributions", json=payload)
