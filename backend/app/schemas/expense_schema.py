"""
schemas/expense_schema.py — Marshmallow schemas for expense endpoints.

Validation responsibility (per GUIDE Rule 4):
  - This file:
      - Field types, lengths, enum values, decimal precision
      - DUPLICATE_SHARE_PARTICIPANT (400) — request shape rule
      - Non-empty-after-trim enforcement for description
  - services/expense_service.py:
      - PAYER_NOT_PARTICIPANT (422) — requires the event roster
      - SHARE_NOT_PARTICIPANT (422) — requires the event roster
      - NO_ADULT_UNITS (422)        — requires participant types

Shares are never part of the request: the server computes them from
participant_ids with the expense's division type.

IMPORTANT: Inherits from marshmallow.Schema directly — never ma.Schema.
           See extensions.py for the full explanation.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import (
    Schema,
    ValidationError,
    fields,
    validate,
    validates_schema,
)

from backend.app.errors import ErrorCode
from backend.app.ledger.records import Category, DivisionType


# ── Shared monetary amount validator ──────────────────────────────────────
#
# Max 2 decimal places, strictly positive. Input with more than 2 decimal
# places is REJECTED with INVALID_AMOUNT_PRECISION — never rounded.
# ──────────────────────────────────────────────────────────────────────────

def _validate_monetary_amount(value: Decimal) -> None:
    """
    The route error handler detects INVALID_AMOUNT_PRECISION by matching the
    raised ValidationError message to the known ErrorCode constant.
    """
    if value <= Decimal("0"):
        raise ValidationError("Amount must be greater than zero.")

    # Decimal("10.123").as_tuple().exponent == -3  → 3 dp → REJECT
    if value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


def _validate_non_empty_after_trim(value: str) -> None:
    """
    Raises ValidationError if the string is blank or contains only whitespace.
    Mirrors the DB CHECK(LENGTH(TRIM(...)) > 0) constraint at the API layer.
    """
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


# ── Create expense ─────────────────────────────────────────────────────────

class CreateExpenseSchema(Schema):
    """
    POST /events/:id/expenses

    participant_ids selects who shares the expense. When omitted, the whole
    event roster shares it. An explicit empty list is passed through so the
    division strategy can reject it (NO_ADULT_UNITS).
    """

    description = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=1,
                max=255,
                error="Description must be between 1 and 255 characters.",
            ),
            _validate_non_empty_after_trim,
        ],
    )

    amount = fields.Decimal(
        required=True,
        validate=_validate_monetary_amount,
    )

    payer_id = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="payer_id must be a positive integer."),
    )

    category = fields.Enum(
        Category,
        load_default=Category.OTHER,
        by_value=True,
        error_messages={"unknown": ErrorCode.INVALID_CATEGORY},
    )

    date = fields.Date(load_default=None)

    division_type = fields.Enum(
        DivisionType,
        load_default=DivisionType.EQUAL,
        by_value=True,
        error_messages={"unknown": ErrorCode.INVALID_DIVISION_TYPE},
    )

    participant_ids = fields.List(
        fields.Int(
            strict=True,
            validate=validate.Range(min=1, error="participant_ids must be positive integers."),
        ),
        load_default=None,
    )

    @validates_schema
    def validate_unique_participants(self, data: dict, **kwargs) -> None:
        participant_ids = data.get("participant_ids")
        if participant_ids and len(participant_ids) != len(set(participant_ids)):
            raise ValidationError(
                {
                    "participant_ids": [ErrorCode.DUPLICATE_SHARE_PARTICIPANT],
                }
            )


# ── Output ─────────────────────────────────────────────────────────────────

class ExpenseShareSchema(Schema):
    participant_id = fields.Int()
    amount = fields.Decimal(places=2, as_string=True)


class ExpenseSchema(Schema):
    """Renders an Expense record; `shares` is filled in when the route has them."""

    id = fields.Int()
    event_id = fields.Int(allow_none=True)
    description = fields.Str()
    amount = fields.Decimal(places=2, as_string=True)
    payer_id = fields.Int(allow_none=True)
    category = fields.Str()
    date = fields.Date(allow_none=True)
    division_type = fields.Enum(DivisionType, by_value=True)
