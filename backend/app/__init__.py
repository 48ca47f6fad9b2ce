"""
app/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time — this enables:
           - Multiple isolated test app instances
           - Clean separation between app creation and app startup
           - `flask db migrate` to work without starting the full server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Configure logging (LOG_LEVEL)
  3. Initialise extensions (SQLAlchemy, Marshmallow) via init_app()
  4. Register the LedgerDataSource factory used by the routes
  5. Register all route blueprints under /api/v1
  6. Register global error handlers (AppError → JSON, Exception → 500)
  7. Register a custom JSON provider to serialise Decimal as string

Note on model imports:
  All model classes are imported inside create_app() so that SQLAlchemy's
  metadata is populated before Alembic inspects it. They are not used
  directly here — the import side-effect is sufficient.
"""

from __future__ import annotations

import logging
import traceback
from decimal import Decimal
from typing import Callable

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from backend.config import config_by_name, validate_ledger_config, validate_production_config

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_console_handler: logging.Handler | None = None


# ── Custom JSON provider ───────────────────────────────────────────────────
# Flask's default JSON encoder does not handle Decimal.
# All monetary amounts are serialised as strings to preserve precision.

class DecimalJSONProvider(DefaultJSONProvider):
    """
    Extends Flask's default JSON provider to serialise Decimal as str.

    Example: Decimal("10.50") → "10.50" (not 10.5 or 10.500000001)
    """

    def default(self, o):
        if isinstance(o, Decimal):
            return str(o)
        return super().default(o)


# ── Application factory ────────────────────────────────────────────────────

def create_app(
        config_name: str = "development",
        source_factory: Callable | None = None,
) -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name:    One of "development", "testing", "production".
                        Resolved via config_by_name in config.py.
                        Defaults to "development".
        source_factory: Callable taking a SQLAlchemy session and returning a
                        LedgerDataSource. Defaults to SqlAlchemyDataSource.

    Returns:
        A fully configured Flask app ready to serve requests.
    """
    app = Flask(__name__)
    app.json_provider_class = DecimalJSONProvider
    app.json = DecimalJSONProvider(app)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured
    else:
        validate_ledger_config(app)

    _configure_logging(app)

    # ── Extensions ─────────────────────────────────────────────────────────
    # Import here (not at module top) to avoid circular imports.
    from backend.app.extensions import db, ma
    db.init_app(app)
    ma.init_app(app)

    # ── Model registration ─────────────────────────────────────────────────
    # Import all models so that SQLAlchemy's MetaData is populated.
    # The imports are intentionally unused by name — side effect is the point.
    with app.app_context():
        from backend.app.models import (  # noqa: F401
            contribution,
            event,
            event_participant,
            expense,
            expense_share,
            participant,
            payment,
        )

    # ── Ledger data source ─────────────────────────────────────────────────
    if source_factory is None:
        from backend.app.services.data_source import SqlAlchemyDataSource
        source_factory = SqlAlchemyDataSource
    app.extensions["ledger_source_factory"] = source_factory

    # ── Blueprints ─────────────────────────────────────────────────────────
    _register_blueprints(app)

    # ── Error handlers ─────────────────────────────────────────────────────
    _register_error_handlers(app)
    _register_cors(app)

    app.logger.info(
        "Carnival Ledger started (config=%s, reconciliation=%s)",
        config_name,
        app.config["LEDGER_RECONCILIATION_POLICY"],
    )
    return app


def _configure_logging(app: Flask) -> None:
    """
    Attaches one console handler to the root logger so module loggers
    (logging.getLogger(__name__)) and app.logger share the same format.
    Repeated create_app() calls (tests) reuse the same handler.
    """
    global _console_handler
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    root = logging.getLogger()
    if _console_handler is None:
        _console_handler = logging.StreamHandler()
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_console_handler)
    _console_handler.setLevel(level)
    root.setLevel(level)
    app.logger.setLevel(level)


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    Every blueprint owns both event-scoped paths (/events/<id>/...) and
    record-ID paths (/expenses/<id>, /payments/<id>), so all of them are
    registered at /api/v1 and spell out their full resource path.
    """
    from backend.app.routes.balances import balances_bp
    from backend.app.routes.contributions import contributions_bp
    from backend.app.routes.events import events_bp
    from backend.app.routes.expenses import expenses_bp
    from backend.app.routes.payments import payments_bp

    app.register_blueprint(events_bp,   url_prefix="/api/v1")
    app.register_blueprint(expenses_bp, url_prefix="/api/v1")
    app.register_blueprint(payments_bp, url_prefix="/api/v1")
    app.register_blueprint(balances_bp, url_prefix="/api/v1")
    app.register_blueprint(contributions_bp, url_prefix="/api/v1")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError        → structured JSON error envelope with the correct HTTP status
      ValidationError → marshmallow schema errors formatted as MISSING_FIELD /
                        INVALID_FIELD responses (400)
      SQLAlchemyError → DATA_SOURCE_ERROR (503); the session is rolled back
      Exception       → generic INTERNAL_ERROR (500); full traceback logged

    Stack traces never leave the server.
    """
    from backend.app.errors import AppError, ErrorCode, data_source_failure
    from backend.app.extensions import db

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Converts an AppError raised anywhere in the request lifecycle
        (service, route) into the standard error envelope.

        Routes never catch AppError — they let it propagate here.
        """
        if error.code == ErrorCode.DATA_SOURCE_ERROR:
            db.session.rollback()
            app.logger.warning("Data source failure on %s %s", request.method, request.path)
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """
        Converts marshmallow ValidationError into the standard error envelope.

        Only the FIRST field error is returned ("one error, not many").
        If the message is one of our registered codes it becomes the code;
        otherwise MISSING_FIELD / INVALID_FIELD is used.
        """
        messages = error.messages  # e.g. {"amount": ["INVALID_AMOUNT_PRECISION"]}

        field = None
        raw_message = "Invalid input."
        code = ErrorCode.INVALID_FIELD

        if isinstance(messages, dict):
            for field_name, field_errors in messages.items():
                field = field_name if field_name != "_schema" else None

                if isinstance(field_errors, list):
                    raw_message = field_errors[0] if field_errors else "Invalid value."
                elif isinstance(field_errors, dict):
                    # Nested/list field errors: {"participant_ids": {0: ["..."]}}
                    first = next(iter(field_errors.values()), ["Invalid value."])
                    raw_message = first[0] if isinstance(first, list) and first else str(first)
                else:
                    raw_message = str(field_errors)

                if raw_message in vars(ErrorCode).values():
                    code = raw_message
                elif str(raw_message).startswith("Missing data for required field"):
                    code = ErrorCode.MISSING_FIELD
                else:
                    code = ErrorCode.INVALID_FIELD
                break
        elif isinstance(messages, list):
            raw_message = messages[0] if messages else "Invalid input."
            if raw_message in vars(ErrorCode).values():
                code = raw_message
            elif str(raw_message).startswith("Missing data for required field"):
                code = ErrorCode.MISSING_FIELD

        response_body = {
            "error": {
                "code": code,
                "message": raw_message if raw_message not in vars(ErrorCode).values()
                else _code_to_message(code),
            }
        }
        if field is not None:
            response_body["error"]["field"] = field

        return jsonify(response_body), 400

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error: SQLAlchemyError):
        """
        A query or write rejected outside the data source (event/participant
        services, commit). Recoverable: the client offers "try again".
        """
        db.session.rollback()
        app.logger.error("Database error on %s %s: %s", request.method, request.path, error)
        failure = data_source_failure("complete the request")
        return jsonify(failure.to_dict()), failure.http_status

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.
        The full traceback is logged; it never appears in the response body.
        """
        if isinstance(error, HTTPException):
            return error
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for browser-based local development.

    Enabled when DEBUG or TESTING is true so a frontend served from another
    local port can call the API.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if allow_all:
            response.headers["Access-Control-Allow-Origin"] = origin if origin else "*"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"

        return response


def _code_to_message(code: str) -> str:
    """
    Returns a human-readable default message for a known error code.
    Used when a ValidationError message IS the error code constant itself
    (e.g. INVALID_AMOUNT_PRECISION raised as ValidationError in schemas).
    """
    _messages = {
        "INVALID_AMOUNT_PRECISION": "Amount must have at most 2 decimal places.",
        "INVALID_CATEGORY": "The category value is not valid.",
        "INVALID_DIVISION_TYPE": "division_type must be 'equal'.",
        "INVALID_PARTICIPANT_TYPE": "type must be 'individual' or 'couple'.",
        "INVALID_EVENT_STATUS": "status must be 'planning', 'active' or 'completed'.",
        "DUPLICATE_SHARE_PARTICIPANT": "The same participant appears more than once in participant_ids.",
    }
    return _messages.get(code, "Invalid input.")
