"""Transactional email over SMTP."""

from __future__ import annotations

import logging
import os
import smtplib
from email.message import EmailMessage
from typing import Optional

from careers.services.draft_service import ApplicationDraft
from careers.utils.results import DispatchResult

_LOGGER = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10
COMPANY_NAME = "CoreCrew Logistics"


def _smtp_host() -> Optional[str]:
    return os.getenv("SMTP_HOST") or None


def is_configured() -> bool:
    return bool(_smtp_host() and os.getenv("MAIL_FROM"))


def _open_connection() -> smtplib.SMTP:
    """Connect, optionally upgrade to TLS and log in using the SMTP_* settings."""
    port = int(os.getenv("SMTP_PORT", "587"))
    server = smtplib.SMTP(_smtp_host(), port, timeout=SMTP_TIMEOUT_SECONDS)
    try:
        if os.getenv("SMTP_STARTTLS", "true").lower() == "true":
            server.starttls()
        username = os.getenv("SMTP_USERNAME")
        if username:
            server.login(username, os.getenv("SMTP_PASSWORD", ""))
    except Exception:
        server.close()
        raise
    return server


def build_confirmation_message(draft: ApplicationDraft) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = f"We received your application for {draft.position}"
    message["From"] = os.getenv("MAIL_FROM", "")
    message["To"] = draft.email
    message.set_content(
        f"Hi {draft.first_name},\n\n"
        f"Thank you for applying for the {draft.position} position at {COMPANY_NAME}. "
        "Your identity verification is complete. Please return to the application page "
        "to review and submit your application.\n\n"
        "Our recruiting team reviews every application and will contact you about next steps.\n\n"
        f"The {COMPANY_NAME} team\n"
    )
    return message


def send_confirmation(draft: ApplicationDraft) -> DispatchResult:
    """Email the applicant once verification completes; never raises."""
    if not is_configured():
        _LOGGER.info("SMTP not configured; skipping confirmation email")
        return DispatchResult.not_configured()
    if not draft.email:
        return DispatchResult.failure("no recipient")

    try:
        with _open_connection() as server:
            server.send_message(build_confirmation_message(draft))
    except (smtplib.SMTPException, OSError) as exc:
        _LOGGER.warning("Confirmation email to %s failed: %s", draft.email, exc)
        return DispatchResult.failure(str(exc) or type(exc).__name__)

    return DispatchResult.success()


def probe() -> DispatchResult:
    """Check that the SMTP relay accepts a connection and a NOOP."""
    if not _smtp_host():
        return DispatchResult.not_configured()

    try:
        with _open_connection() as server:
            code, _ = server.noop()
    except (smtplib.SMTPException, OSError) as exc:
        _LOGGER.warning("SMTP probe failed: %s", exc)
        return DispatchResult.failure(str(exc) or type(exc).__name__)

    if code != 250:
        return DispatchResult.failure(f"unexpected NOOP reply {code}")
    return DispatchResult.success()
