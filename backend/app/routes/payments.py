"""
routes/payments.py — Payment route handlers.

Layer rules (GUIDE Rule 3):
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries. No bare SQL.

Endpoints (base url_prefix=/api/v1):
  POST   /events/:id/payments   → 201  record a payment (may carry OVERPAYMENT warning)
  GET    /events/:id/payments   → 200  list payments, newest first
  GET    /payments/:id          → 200  get a payment
  DELETE /payments/:id          → 200  delete a payment
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from backend.app.extensions import db, ledger_source
from backend.app.schemas.payment_schema import CreatePaymentSchema, PaymentSchema
from backend.app.services import payment_service

payments_bp = Blueprint("payments", __name__)


@payments_bp.route("/events/<int:event_id>/payments", methods=["POST"])
def create_payment(event_id: int):
    """
    POST /events/:id/payments

    Overpayment is recorded with a warning (201, not 4xx).
    """
    data = CreatePaymentSchema().load(request.get_json(force=True) or {})
    payment, warnings = payment_service.create_payment(
        event_id=event_id,
        data=data,
        source=ledger_source(),
    )
    db.session.commit()
    return jsonify({"data": PaymentSchema().dump(payment), "warnings": warnings}), 201


@payments_bp.route("/events/<int:event_id>/payments", methods=["GET"])
def list_payments(event_id: int):
    """GET /events/:id/payments — Newest first."""
    payments = payment_service.list_payments(event_id=event_id, source=ledger_source())
    return jsonify({
        "data": PaymentSchema(many=True).dump(payments),
        "warnings": [],
    }), 200


@payments_bp.route("/payments/<int:payment_id>", methods=["GET"])
def get_payment(payment_id: int):
    """GET /payments/:id"""
    payment = payment_service.get_payment(payment_id=payment_id, source=ledger_source())
    return jsonify({"data": PaymentSchema().dump(payment), "warnings": []}), 200


@payments_bp.route("/payments/<int:payment_id>", methods=["DELETE"])
def delete_payment(payment_id: int):
    """DELETE /payments/:id"""
    payment_service.delete_payment(payment_id=payment_id, source=ledger_source())
    db.session.commit()
    return jsonify({
        "data": {
            "deleted": True,
            "payment_id": payment_id,
        },
        "warnings": [],
    }), 200
