"""
routes/contributions.py — Contribution route handlers.

Layer rules (GUIDE Rule 3):
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries. No bare SQL.

Endpoints (base url_prefix=/api/v1):
  POST   /contributions            → 201  record a contribution
  GET    /contributions            → 200  list, most recent month first
                                          (?participant_id= to filter)
  GET    /contributions/totals     → 200  total per participant, largest first
  GET    /contributions/by-month   → 200  grouped by "YYYY-MM"
  DELETE /contributions/:id        → 200  delete a contribution
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from backend.app.extensions import db
from backend.app.schemas.contribution_schema import (
    ContributionMonthSchema,
    ContributionSchema,
    ContributionTotalSchema,
    CreateContributionSchema,
)
from backend.app.services import contribution_service

contributions_bp = Blueprint("contributions", __name__)


@contributions_bp.route("/contributions", methods=["POST"])
def create_contribution():
    """POST /contributions"""
    data = CreateContributionSchema().load(request.get_json(force=True) or {})
    contribution = contribution_service.create_contribution(data=data, session=db.session)
    db.session.commit()
    return jsonify({"data": ContributionSchema().dump(contribution), "warnings": []}), 201


@contributions_bp.route("/contributions", methods=["GET"])
def list_contributions():
    """GET /contributions — optionally ?participant_id=<id>."""
    contributions = contribution_service.list_contributions(
        session=db.session,
        participant_id=request.args.get("participant_id", type=int),
    )
    return jsonify({
        "data": ContributionSchema(many=True).dump(contributions),
        "warnings": [],
    }), 200


@contributions_bp.route("/contributions/totals", methods=["GET"])
def contribution_totals():
    """GET /contributions/totals"""
    totals = contribution_service.contribution_totals(session=db.session)
    return jsonify({
        "data": ContributionTotalSchema(many=True).dump(totals),
        "warnings": [],
    }), 200


@contributions_bp.route("/contributions/by-month", methods=["GET"])
def contributions_by_month():
    """GET /contributions/by-month"""
    months = contribution_service.contributions_by_month(session=db.session)
    return jsonify({
        "data": ContributionMonthSchema(many=True).dump(months),
        "warnings": [],
    }), 200


@contributions_bp.route("/contributions/<int:contribution_id>", methods=["DELETE"])
def delete_contribution(contribution_id: int):
    """DELETE /contributions/:id"""
    contribution_service.delete_contribution(contribution_id=contribution_id, session=db.session)
    db.session.commit()
    return jsonify({
        "data": {
            "deleted": True,
            "contribution_id": contribution_id,
        },
        "warnings": [],
    }), 200
