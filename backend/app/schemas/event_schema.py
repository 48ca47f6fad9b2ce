"""
schemas/event_schema.py — Marshmallow schemas for events, participants and rosters.

IMPORTANT: Inherits from marshmallow.Schema directly — never ma.Schema.
           See extensions.py for the full explanation.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from backend.app.errors import ErrorCode
from backend.app.ledger.records import ParticipantType
from backend.app.models.event import EventStatus


def _validate_non_empty_after_trim(value: str) -> None:
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


# ── Events ─────────────────────────────────────────────────────────────────

class CreateEventSchema(Schema):
    """POST /events"""

    name = fields.Str(
        required=True,
        validate=[
            validate.Length(min=1, max=100, error="Name must be between 1 and 100 characters."),
            _validate_non_empty_after_trim,
        ],
    )

    year = fields.Int(
        load_default=None,
        allow_none=True,
        strict=True,
        validate=validate.Range(min=1900, max=2999, error="year must be between 1900 and 2999."),
    )

    start_date = fields.Date(load_default=None, allow_none=True)
    end_date = fields.Date(load_default=None, allow_none=True)

    status = fields.Enum(
        EventStatus,
        load_default=EventStatus.PLANNING,
        by_value=True,
    )

    @validates_schema
    def validate_date_order(self, data: dict, **kwargs) -> None:
        start, end = data.get("start_date"), data.get("end_date")
        if start is not None and end is not None and end < start:
            raise ValidationError({"end_date": ["end_date must not be before start_date."]})


class UpdateEventStatusSchema(Schema):
    """PATCH /events/:id/status"""

    status = fields.Enum(
        EventStatus,
        required=True,
        by_value=True,
        error_messages={"unknown": ErrorCode.INVALID_EVENT_STATUS},
    )


class EventSchema(Schema):
    id = fields.Int()
    name = fields.Str()
    year = fields.Int(allow_none=True)
    start_date = fields.Date(allow_none=True)
    end_date = fields.Date(allow_none=True)
    status = fields.Enum(EventStatus, by_value=True)
    created_at = fields.DateTime(allow_none=True)


# ── Participants ───────────────────────────────────────────────────────────

class CreateParticipantSchema(Schema):
    """POST /participants"""

    name = fields.Str(
        required=True,
        validate=[
            validate.Length(min=1, max=100, error="Name must be between 1 and 100 characters."),
            _validate_non_empty_after_trim,
        ],
    )

    type = fields.Enum(
        ParticipantType,
        load_default=ParticipantType.INDIVIDUAL,
        by_value=True,
        error_messages={"unknown": ErrorCode.INVALID_PARTICIPANT_TYPE},
    )

    # Informational only; never weighs into a split.
    children = fields.Int(
        load_default=0,
        strict=True,
        validate=validate.Range(min=0, error="children must not be negative."),
    )


class AddParticipantSchema(Schema):
    """POST /events/:id/participants"""

    participant_id = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="participant_id must be a positive integer."),
    )


class ParticipantSchema(Schema):
    """Renders either a Participant ORM row or a Participant record."""

    id = fields.Int()
    name = fields.Str()
    type = fields.Enum(ParticipantType, by_value=True)
    children = fields.Int()
    adult_units = fields.Method("get_adult_units")

    def get_adult_units(self, obj) -> int:
        return ParticipantType(obj.type).adult_units
