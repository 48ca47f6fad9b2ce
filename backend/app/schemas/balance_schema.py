"""
schemas/balance_schema.py — Output schemas for the balance view and reports.

Dump-only. Every amount is rendered as a string with two decimals.
"""

from __future__ import annotations

from marshmallow import Schema, fields

from backend.app.schemas.event_schema import ParticipantSchema


def _money():
    return fields.Decimal(places=2, as_string=True)


class ParticipantBalanceSchema(Schema):
    participant = fields.Nested(ParticipantSchema)
    paid = _money()
    owed = _money()
    owes = _money()
    balance = _money()


class SettlementLineSchema(Schema):
    ower_id = fields.Int()
    payer_id = fields.Int()
    amount = _money()
    paid_amount = _money()
    outstanding = _money()
    is_paid = fields.Bool()


class PaymentInstructionSchema(Schema):
    receiver = fields.Nested(ParticipantSchema, only=("id", "name"))
    amount = _money()
    is_paid = fields.Bool()


class PaymentsByPayerSchema(Schema):
    payer = fields.Nested(ParticipantSchema, only=("id", "name"))
    payments = fields.List(fields.Nested(PaymentInstructionSchema))


class DetailedPaymentSchema(Schema):
    from_id = fields.Int()
    from_name = fields.Str()
    to_id = fields.Int()
    to_name = fields.Str()
    amount = _money()
    expense_id = fields.Int()
    expense_description = fields.Str()


class LedgerViewSchema(Schema):
    event_id = fields.Int()
    balances = fields.List(fields.Nested(ParticipantBalanceSchema))
    settlement_lines = fields.List(fields.Nested(SettlementLineSchema))
    payments_by_payer = fields.List(fields.Nested(PaymentsByPayerSchema))
    detailed_payments = fields.List(fields.Nested(DetailedPaymentSchema))
    balance_sum = _money()
    outstanding_total = _money()


class CategorySummarySchema(Schema):
    category = fields.Str()
    total = _money()
    percentage = _money()
