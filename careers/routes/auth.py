"""/auth routes running the ID.me Authorization Code + PKCE flow."""

from __future__ import annotations

from flask import Blueprint, current_app, redirect, request, session, url_for

from careers.services import idme_service, wizard
from careers.utils.auth import generate_code_challenge, generate_code_verifier, generate_state
from careers.utils.session import OAUTH_SESSION_KEY, require_draft

bp = Blueprint("auth", __name__, url_prefix="/auth")


@bp.get("/idme")
def idme_start():
    """Redirect the applicant to ID.me with a fresh PKCE challenge and state."""
    draft, error_response = require_draft()
    if error_response is not None:
        return error_response

    if not idme_service.is_configured():
        return redirect(url_for("apply.verify"))

    code_verifier = generate_code_verifier()
    state = generate_state()
    authorization_url = idme_service.build_authorization_url(state, generate_code_challenge(code_verifier))

    session[OAUTH_SESSION_KEY] = {"code_verifier": code_verifier, "state": state}
    return redirect(authorization_url)


@bp.get("/idme/callback")
def idme_callback():
    """Validate state, exchange the code and mark the draft verified."""
    draft, error_response = require_draft()
    if error_response is not None:
        return error_response

    oauth = session.get(OAUTH_SESSION_KEY) or {}
    profile = idme_service.complete_callback(
        expected_state=oauth.get("state"),
        returned_state=request.args.get("state"),
        code=request.args.get("code"),
        code_verifier=oauth.get("code_verifier"),
        error=request.args.get("error"),
    )
    session.pop(OAUTH_SESSION_KEY, None)

    wizard.complete_identity_provider_verification(draft, profile)
    current_app.logger.info("Draft %s verified via ID.me", draft.draft_id)
    return redirect(url_for("apply.submit"))
