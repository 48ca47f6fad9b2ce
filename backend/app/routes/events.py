"""
routes/events.py — Event, participant and roster route handlers.

Layer rules (GUIDE Rule 3):
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries. No bare SQL.

Endpoints (base url_prefix=/api/v1):
  POST   /events                        → 201  create event
  GET    /events                        → 200  list events (newest first)
  GET    /events/:id                    → 200  get event + roster
  PATCH  /events/:id/status             → 200  change the event status
  POST   /participants                  → 201  create participant (household)
  POST   /events/:id/participants       → 201  add participant to the roster
  GET    /events/:id/participants       → 200  list the roster (by name)
  DELETE /events/:id/participants/:pid  → 200  take a participant off the roster
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from backend.app.extensions import db
from backend.app.schemas.event_schema import (
    AddParticipantSchema,
    CreateEventSchema,
    CreateParticipantSchema,
    EventSchema,
    ParticipantSchema,
    UpdateEventStatusSchema,
)
from backend.app.services import event_service

events_bp = Blueprint("events", __name__)


# ── Events ─────────────────────────────────────────────────────────────────

@events_bp.route("/events", methods=["POST"])
def create_event():
    """POST /events — Create a new event (carnival)."""
    data = CreateEventSchema().load(request.get_json(force=True) or {})
    event = event_service.create_event(data=data, session=db.session)
    db.session.commit()
    return jsonify({"data": EventSchema().dump(event), "warnings": []}), 201


@events_bp.route("/events", methods=["GET"])
def list_events():
    """GET /events — List all events."""
    events = event_service.list_events(session=db.session)
    return jsonify({"data": EventSchema(many=True).dump(events), "warnings": []}), 200


@events_bp.route("/events/<int:event_id>", methods=["GET"])
def get_event(event_id: int):
    """GET /events/:id — Event details with its roster."""
    event = event_service.get_event(event_id=event_id, session=db.session)
    participants = event_service.list_event_participants(event_id=event_id, session=db.session)
    payload = EventSchema().dump(event)
    payload["participants"] = ParticipantSchema(many=True).dump(participants)
    return jsonify({"data": payload, "warnings": []}), 200


@events_bp.route("/events/<int:event_id>/status", methods=["PATCH"])
def update_event_status(event_id: int):
    """
    PATCH /events/:id/status

    Activating an event completes whichever event was active before.
    """
    data = UpdateEventStatusSchema().load(request.get_json(force=True) or {})
    event = event_service.update_event_status(
        event_id=event_id,
        status=data["status"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": EventSchema().dump(event), "warnings": []}), 200


# ── Participants ───────────────────────────────────────────────────────────

@events_bp.route("/participants", methods=["POST"])
def create_participant():
    """POST /participants — Create a participant (individual or couple)."""
    data = CreateParticipantSchema().load(request.get_json(force=True) or {})
    participant = event_service.create_participant(data=data, session=db.session)
    db.session.commit()
    return jsonify({"data": ParticipantSchema().dump(participant), "warnings": []}), 201


@events_bp.route("/events/<int:event_id>/participants", methods=["POST"])
def add_participant(event_id: int):
    """POST /events/:id/participants — Put an existing participant on the roster."""
    data = AddParticipantSchema().load(request.get_json(force=True) or {})
    participant = event_service.add_participant_to_event(
        event_id=event_id,
        participant_id=data["participant_id"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": ParticipantSchema().dump(participant), "warnings": []}), 201


@events_bp.route("/events/<int:event_id>/participants", methods=["GET"])
def list_participants(event_id: int):
    """GET /events/:id/participants — The event's roster, sorted by name."""
    participants = event_service.list_event_participants(event_id=event_id, session=db.session)
    return jsonify({
        "data": ParticipantSchema(many=True).dump(participants),
        "warnings": [],
    }), 200


@events_bp.route("/events/<int:event_id>/participants/<int:participant_id>", methods=["DELETE"])
def remove_participant(event_id: int, participant_id: int):
    """DELETE /events/:id/participants/:pid — Only for participants without records."""
    event_service.remove_participant_from_event(
        event_id=event_id,
        participant_id=participant_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({
        "data": {
            "deleted": True,
            "event_id": event_id,
            "participant_id": participant_id,
        },
        "warnings": [],
    }), 200
