"""Flask application setup and blueprint wiring."""

from __future__ import annotations

import os
import secrets
import tempfile
from typing import Any, Dict, Optional

from flask import Flask, render_template
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from careers.database import mongo_enabled
from careers.routes import register_routes
from careers.services.idme_service import IdentityProviderError
from careers.services.wizard import WizardError
from careers.utils.session import register_draft_cleanup
from careers.utils.uploads import MAX_APPLICATION_FILES, MAX_FILE_BYTES, UploadRejected

# Six attachments at the per-file cap plus room for the form fields.
UPLOAD_LIMIT_BYTES = MAX_APPLICATION_FILES * MAX_FILE_BYTES + 1024 * 1024

COMPANY = {
    "name": "CoreCrew Logistics",
    "email": "corecrewlogistics@gmail.com",
    "phone": "+13105742415",
    "address": "4700 Stockdale Hwy, Bakersfield, CA 93309",
}


def _render_error(message: str, status: int):
    return render_template("error.html", message=message), status


def register_error_handlers(app: Flask) -> None:
    """Map wizard, upload and identity-provider failures to the error view."""

    @app.errorhandler(WizardError)
    def _wizard_error(exc: WizardError):
        return _render_error(exc.message, exc.status_code)

    @app.errorhandler(UploadRejected)
    def _upload_rejected(exc: UploadRejected):
        return _render_error(exc.message, exc.status_code)

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(exc: RequestEntityTooLarge):
        return _render_error("Your upload is too large. Each file must be 15 MB or smaller.", 413)

    @app.errorhandler(IdentityProviderError)
    def _identity_provider_error(exc: IdentityProviderError):
        app.logger.warning("Identity verification rejected: %s", exc)
        return _render_error("We could not verify your identity. Please try again.", 400)

    @app.errorhandler(Exception)
    def _unhandled(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        app.logger.exception("Unhandled error while processing request")
        return _render_error("Something went wrong. Please try again later.", 500)


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """Configure and return the Flask application instance."""
    app = Flask(__name__)
    CORS(app)

    secret = os.getenv("SESSION_SECRET")
    if not secret:
        secret = secrets.token_hex(32)
        app.logger.warning("SESSION_SECRET is not set; sessions will not survive a restart")

    app.config.update(
        SECRET_KEY=secret,
        MAX_CONTENT_LENGTH=UPLOAD_LIMIT_BYTES,
        UPLOAD_FOLDER=os.getenv("UPLOAD_FOLDER") or os.path.join(tempfile.gettempdir(), "corecrew-uploads"),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true",
    )
    if config:
        app.config.update(config)

    @app.context_processor
    def _inject_company() -> Dict[str, Any]:
        return {"COMPANY": COMPANY}

    register_draft_cleanup(app)
    register_error_handlers(app)
    register_routes(app)

    if mongo_enabled():
        try:
            from careers.services import application_service
            with app.app_context():
                application_service.create_indexes()
                app.logger.info("MongoDB indexes created successfully")
        except Exception as e:
            app.logger.warning(f"Failed to create MongoDB indexes: {e}")

    return app
