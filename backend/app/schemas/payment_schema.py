"""
schemas/payment_schema.py — Marshmallow schemas for payment endpoints.

Validation responsibility (per GUIDE Rule 4):
  - This file: field types, decimal precision, positive amount, notes length.
  - services/payment_service.py:
      - SELF_PAYMENT (422)             — kept with the other payer/receiver rules
      - PAYER_NOT_PARTICIPANT (422)    — requires the event roster
      - RECEIVER_NOT_PARTICIPANT (422) — requires the event roster
      - OVERPAYMENT (warning, 201)     — requires the current balances

IMPORTANT: Inherits from marshmallow.Schema directly — never ma.Schema.
           See extensions.py for the full explanation.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import Schema, ValidationError, fields, validate

from backend.app.errors import ErrorCode


# ── Shared monetary amount validator ──────────────────────────────────────
#
# Identical logic to the validator in expense_schema.py. Defined here
# rather than imported from expense_schema to keep each schema file
# self-contained.
# ──────────────────────────────────────────────────────────────────────────

def _validate_monetary_amount(value: Decimal) -> None:
    if value <= Decimal("0"):
        raise ValidationError("Amount must be greater than zero.")
    if value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


class CreatePaymentSchema(Schema):
    """
    POST /events/:id/payments

    Field rules:
      payer_id    : required, positive integer (on the roster — service check)
      receiver_id : required, positive integer (on the roster — service check)
      amount      : required, positive Decimal, max 2 decimal places.
                    Overpayment is allowed; the service returns a warning.
      notes       : optional, max 255 chars. Defaults to
                    "Payment from <payer> to <receiver>".
    """

    payer_id = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="payer_id must be a positive integer."),
    )

    receiver_id = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="receiver_id must be a positive integer."),
    )

    amount = fields.Decimal(
        required=True,
        validate=_validate_monetary_amount,
    )

    notes = fields.Str(
        load_default=None,
        allow_none=True,
        validate=validate.Length(max=255, error="notes must be at most 255 characters."),
    )


class PaymentSchema(Schema):
    id = fields.Int()
    event_id = fields.Int(allow_none=True)
    payer_id = fields.Int()
    receiver_id = fields.Int()
    amount = fields.Decimal(places=2, as_string=True)
    notes = fields.Str()
    created_at = fields.DateTime(allow_none=True)
