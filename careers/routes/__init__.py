"""Blueprint registration helper."""

from __future__ import annotations

from flask import Flask

from .apply import bp as apply_bp
from .auth import bp as auth_bp
from .contact import bp as contact_bp
from .pages import bp as pages_bp
from .quick_apply import bp as quick_apply_bp


def register_routes(app: Flask) -> None:
    """Register all application blueprints on the provided Flask app."""
    app.register_blueprint(pages_bp)
    app.register_blueprint(apply_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(contact_bp)
    app.register_blueprint(quick_apply_bp)
