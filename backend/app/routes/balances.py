"""
routes/balances.py — Balance and report route handlers.

Layer rules (GUIDE Rule 3):
  - Call ONE service, return envelope.
  - No business logic. No DB queries. No bare SQL.
  - Every request triggers a full recompute; nothing is cached.

Endpoints (base url_prefix=/api/v1):
  GET /events/:id/balances            → 200  balances, who-pays-whom, per-expense detail
  GET /events/:id/reports/categories  → 200  expense totals per category

The balance response carries data-quality warnings (SKIPPED_RECORDS,
ROUNDING_DRIFT) in the envelope; they never turn the response into an error.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from backend.app.extensions import ledger_source
from backend.app.schemas.balance_schema import CategorySummarySchema, LedgerViewSchema
from backend.app.services import balance_service

balances_bp = Blueprint("balances", __name__)


@balances_bp.route("/events/<int:event_id>/balances", methods=["GET"])
def get_balances(event_id: int):
    """
    GET /events/:id/balances

    The reconciliation policy and drift tolerance come from the app config
    (LEDGER_RECONCILIATION_POLICY, LEDGER_DRIFT_TOLERANCE).
    """
    view = balance_service.recompute(
        event_id=event_id,
        source=ledger_source(),
        policy=current_app.config["LEDGER_RECONCILIATION_POLICY"],
        tolerance=current_app.config["LEDGER_DRIFT_TOLERANCE"],
    )
    return jsonify({
        "data": LedgerViewSchema().dump(view),
        "warnings": list(view.warnings),
    }), 200


@balances_bp.route("/events/<int:event_id>/reports/categories", methods=["GET"])
def get_category_report(event_id: int):
    """GET /events/:id/reports/categories — Largest category first."""
    summary = balance_service.category_report(event_id=event_id, source=ledger_source())
    return jsonify({
        "data": CategorySummarySchema(many=True).dump(summary),
        "warnings": [],
    }), 200
