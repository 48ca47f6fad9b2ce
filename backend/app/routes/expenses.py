"""
routes/expenses.py — Expense route handlers.

Registered at url_prefix=/api/v1 (not /api/v1/expenses) because this blueprint
owns BOTH the event-scoped paths (/events/:id/expenses) and the
expense-ID paths (/expenses/:id).

Layer rules (GUIDE Rule 3):
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries. No bare SQL.

Endpoints:
  POST   /events/:id/expenses   → 201  create expense (server computes shares)
  GET    /events/:id/expenses   → 200  list expenses, newest first
  GET    /expenses/:id          → 200  get expense + shares
  DELETE /expenses/:id          → 200  delete expense and its shares
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from backend.app.extensions import db, ledger_source
from backend.app.schemas.expense_schema import (
    CreateExpenseSchema,
    ExpenseSchema,
    ExpenseShareSchema,
)
from backend.app.services import expense_service

expenses_bp = Blueprint("expenses", __name__)


def _serialize_expense(expense, shares) -> dict:
    payload = ExpenseSchema().dump(expense)
    payload["shares"] = ExpenseShareSchema(many=True).dump(shares)
    return payload


# ── Event-scoped expense routes ────────────────────────────────────────────

@expenses_bp.route("/events/<int:event_id>/expenses", methods=["POST"])
def create_expense(event_id: int):
    """
    POST /events/:id/expenses — Record a new expense.
    Shares are computed by the server from participant_ids (default: whole roster).
    """
    data = CreateExpenseSchema().load(request.get_json(force=True) or {})
    expense, shares = expense_service.create_expense(
        event_id=event_id,
        data=data,
        source=ledger_source(),
    )
    db.session.commit()
    return jsonify({"data": _serialize_expense(expense, shares), "warnings": []}), 201


@expenses_bp.route("/events/<int:event_id>/expenses", methods=["GET"])
def list_expenses(event_id: int):
    """GET /events/:id/expenses — List the event's expenses, newest first."""
    expenses = expense_service.list_expenses(event_id=event_id, source=ledger_source())
    return jsonify({
        "data": ExpenseSchema(many=True).dump(expenses),
        "warnings": [],
    }), 200


# ── Expense-ID routes ──────────────────────────────────────────────────────

@expenses_bp.route("/expenses/<int:expense_id>", methods=["GET"])
def get_expense(expense_id: int):
    """GET /expenses/:id — Expense detail including shares."""
    expense, shares = expense_service.get_expense(expense_id=expense_id, source=ledger_source())
    return jsonify({"data": _serialize_expense(expense, shares), "warnings": []}), 200


@expenses_bp.route("/expenses/<int:expense_id>", methods=["DELETE"])
def delete_expense(expense_id: int):
    """DELETE /expenses/:id — Hard delete; the shares go with the expense."""
    expense_service.delete_expense(expense_id=expense_id, source=ledger_source())
    db.session.commit()
    return jsonify({
        "data": {
            "deleted": True,
            "expense_id": expense_id,
        },
        "warnings": [],
    }), 200
