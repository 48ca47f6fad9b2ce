"""
extensions.py — Flask extension singletons.

Initialises SQLAlchemy and marshmallow as module-level objects so they can be
imported anywhere without creating circular dependencies.

Pattern:
    1. Create the extension object here (no app attached yet).
    2. Call init_app(app) inside the app factory in app/__init__.py.
    3. Import `db` or `ma` from here wherever needed.

Only the SQLAlchemy data source and the routes touch `db`. The ledger core
(app/ledger/) never imports from here; it receives plain records.
"""

from flask import current_app
from flask_marshmallow import Marshmallow
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Marshmallow instance.
#
# IMPORTANT — schema inheritance rule:
#   All Schema classes (in app/schemas/) inherit from marshmallow.Schema
#   directly, NOT from ma.Schema. ma.Schema requires an active Flask
#   application context and unit tests in tests/unit/ run without one.
ma = Marshmallow()


def ledger_source():
    """
    LedgerDataSource bound to the current request's session.

    create_app() registers the factory under app.extensions; tests may pass
    their own (e.g. an in-memory fake) to create_app(source_factory=...).
    """
    factory = current_app.extensions["ledger_source_factory"]
    return factory(db.session)
