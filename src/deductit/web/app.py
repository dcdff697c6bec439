"""Flask application factory."""

import logging
from typing import Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from deductit.database.base import Database
from deductit.database.factories import create_sqlite_database
from deductit.domain.classifier import AIClassifier
from deductit.domain.errors import (
    ConflictError,
    DomainError,
    ExtractionError,
    NotFoundError,
    UpstreamError,
    file_too_large,
)
from deductit.domain.open_banking import OpenBankingSource
from deductit.domain.statement import MAX_UPLOAD_BYTES, StatementService
from deductit.web.api import api

logger = logging.getLogger(__name__)

EXTENSION_KEY = "deductit"

# Most specific first; anything else derived from DomainError is a 400
ERROR_STATUS = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ExtractionError, 422),
    (UpstreamError, 502),
)


def status_for(error: DomainError) -> int:
    """Return the HTTP status for a domain error."""
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 400


def create_app(
    db: Optional[Database] = None,
    open_banking: Optional[OpenBankingSource] = None,
    ai_classifier: Optional[AIClassifier] = None,
    statement_service: Optional[StatementService] = None,
) -> Flask:
    """Create the deductit API application.

    Args:
        db: Database instance; defaults to the SQLite database from
            DEDUCTIT_DB_PATH
        open_banking: Aggregator client; open-banking routes answer 503 without one
        ai_classifier: Optional escalation classifier
        statement_service: PDF statement service; replaced in tests

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES
    app.json.sort_keys = False

    if db is None:
        db = create_sqlite_database()
        db.connect()
        db.initialize_schema()

    app.extensions[EXTENSION_KEY] = {
        "db": db,
        "open_banking": open_banking,
        "ai_classifier": ai_classifier,
        "statements": statement_service or StatementService(),
    }
    app.register_blueprint(api)

    @app.teardown_appcontext
    def release_session(exc):
        # Each request gets a fresh ORM session
        db.disconnect()

    @app.errorhandler(DomainError)
    def handle_domain_error(e):
        status = status_for(e)
        log = logger.warning if status < 500 else logger.error
        log("Request failed with %d: %s", status, e)
        return jsonify({"success": False, "error": str(e)}), status

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        return jsonify({"success": False, "error": file_too_large()}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"success": False, "error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        logger.error("Unhandled exception: %s", e, exc_info=True)
        return jsonify({"success": False, "error": "Internal server error"}), 500

    return app
