"""
schemas/contribution_schema.py — Marshmallow schemas for contribution endpoints.

Validation responsibility (per GUIDE Rule 4):
  - This file: field types, decimal precision, positive amount, month format.
  - services/contribution_service.py:
      - PARTICIPANT_NOT_FOUND (404) — requires the participants table

IMPORTANT: Inherits from marshmallow.Schema directly — never ma.Schema.
           See extensions.py for the full explanation.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from marshmallow import Schema, ValidationError, fields, validate

from backend.app.errors import ErrorCode
from backend.app.schemas.event_schema import ParticipantSchema

MONTH_FORMAT = "%Y-%m"


def _validate_monetary_amount(value: Decimal) -> None:
    if value <= Decimal("0"):
        raise ValidationError("Amount must be greater than zero.")
    if value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


def _current_month() -> dt.date:
    return dt.date.today().replace(day=1)


class CreateContributionSchema(Schema):
    """
    POST /contributions

    Field rules:
      participant_id : required, positive integer (must exist — service check)
      amount         : required, positive Decimal, max 2 decimal places
      month          : optional "YYYY-MM", defaults to the current month
      notes          : optional, max 255 chars
    """

    participant_id = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="participant_id must be a positive integer."),
    )

    amount = fields.Decimal(
        required=True,
        validate=_validate_monetary_amount,
    )

    month = fields.Date(
        format=MONTH_FORMAT,
        load_default=_current_month,
        error_messages={"invalid": "month must be formatted as YYYY-MM."},
    )

    notes = fields.Str(
        load_default=None,
        allow_none=True,
        validate=validate.Length(max=255, error="notes must be at most 255 characters."),
    )


class ContributionSchema(Schema):
    """Renders a Contribution ORM row or record."""

    id = fields.Int()
    participant_id = fields.Int()
    amount = fields.Decimal(places=2, as_string=True)
    month = fields.Date(format=MONTH_FORMAT)
    notes = fields.Str(allow_none=True)
    created_at = fields.DateTime(allow_none=True)


class ContributionTotalSchema(Schema):
    participant = fields.Nested(ParticipantSchema)
    total = fields.Decimal(places=2, as_string=True)


class ContributionMonthSchema(Schema):
    month = fields.Str()
    total = fields.Decimal(places=2, as_string=True)
    contributions = fields.List(fields.Nested(ContributionSchema))
