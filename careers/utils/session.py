"""Session helpers binding the browser session to its application draft."""

from __future__ import annotations

import os
import time
from typing import Any, Optional, Tuple

from flask import Flask, redirect, request, session, url_for

from careers.services.draft_service import ApplicationDraft, load_draft, prune_expired_drafts

DRAFT_SESSION_KEY = "draft_id"
OAUTH_SESSION_KEY = "oauth"

DEFAULT_PRUNE_INTERVAL_SECONDS = 60.0
SKIP_CLEANUP_ENDPOINTS = frozenset({"pages.healthz", "pages.healthz_email", "static"})


def current_draft() -> Optional[ApplicationDraft]:
    """Return the draft referenced by the session cookie, if it is still live."""
    draft = load_draft(session.get(DRAFT_SESSION_KEY))
    if draft is None:
        session.pop(DRAFT_SESSION_KEY, None)
    return draft


def bind_draft(draft: ApplicationDraft) -> None:
    session[DRAFT_SESSION_KEY] = draft.draft_id


def clear_draft() -> None:
    session.pop(DRAFT_SESSION_KEY, None)
    session.pop(OAUTH_SESSION_KEY, None)


def redirect_to_entry():
    return redirect(url_for("apply.entry"))


def require_draft() -> Tuple[Optional[ApplicationDraft], Optional[Any]]:
    """Return the session's draft, or a redirect to the entry page when there is none."""
    draft = current_draft()
    if draft is None:
        return None, redirect_to_entry()
    return draft, None


def require_verified_draft() -> Tuple[Optional[ApplicationDraft], Optional[Any]]:
    """Like ``require_draft`` but also demands a completed identity verification."""
    draft, error_response = require_draft()
    if error_response is not None:
        return None, error_response
    if not draft.verification.is_verified:
        return None, redirect_to_entry()
    return draft, None


def prune_interval_seconds() -> float:
    try:
        return float(os.getenv("DRAFT_PRUNE_INTERVAL_SECONDS", DEFAULT_PRUNE_INTERVAL_SECONDS))
    except ValueError:
        return DEFAULT_PRUNE_INTERVAL_SECONDS


def register_draft_cleanup(app: Flask) -> None:
    """Attach a throttled before-request handler that drops abandoned drafts.

    Health checks never trigger the prune, so an unreachable MongoDB cannot
    stall a liveness probe.
    """
    last_run = {"at": None}

    @app.before_request
    def _cleanup_drafts() -> None:
        if request.endpoint in SKIP_CLEANUP_ENDPOINTS:
            return
        current = time.monotonic()
        if last_run["at"] is not None and current - last_run["at"] < prune_interval_seconds():
            return
        last_run["at"] = current
        prune_expired_drafts()
