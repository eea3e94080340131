"""Contact form and newsletter sign-up handlers."""

from __future__ import annotations

from flask import Blueprint, current_app, redirect, request, url_for

from careers.services import contact_service, notification_service
from careers.services.notification_service import TextSummary
from careers.utils.text import clean_field, is_valid_email

bp = Blueprint("contact", __name__)


@bp.post("/contact")
def send_contact_message():
    """Store the message and notify the team; the visitor always lands back on /contact."""
    name = clean_field(request.form.get("name"))
    email = clean_field(request.form.get("email"))
    subject = clean_field(request.form.get("subject"))
    message = clean_field(request.form.get("message"))

    stored = contact_service.save_contact_message(name, email, subject, message)
    if not stored.ok:
        current_app.logger.warning("Contact message not stored: %s", stored.error)

    notification_service.send(
        TextSummary(f"New contact message\nFrom: {name} <{email}>\nSubject: {subject}\nMessage: {message}")
    )
    return redirect(url_for("pages.contact"))


@bp.post("/newsletter")
def subscribe_newsletter():
    email = clean_field(request.form.get("email")).lower()
    if is_valid_email(email):
        result = contact_service.add_newsletter_subscriber(email)
        if not result.ok:
            current_app.logger.warning("Newsletter subscriber not stored: %s", result.error)
        notification_service.send(TextSummary(f"New newsletter subscriber: {email}"))
    return redirect(url_for("pages.index"))
