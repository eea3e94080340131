"""Storage for contact-form messages and newsletter sign-ups."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict

from pymongo.errors import PyMongoError

from careers import database
from careers.utils.auth import now_iso, now_millis
from careers.utils.results import DispatchResult
from careers.utils.text import sanitize_key_fragment

_LOGGER = logging.getLogger(__name__)


def save_contact_message(name: str, email: str, subject: str, message: str) -> DispatchResult:
    """Store a contact-form message under ``contact:<millis>:<email>``."""
    collection = database.get_collection("contact_messages")
    if collection is None:
        return DispatchResult.failure("disabled")

    document: Dict[str, Any] = {
        "key": f"contact:{now_millis()}:{sanitize_key_fragment(email)}",
        "name": name,
        "email": email,
        "subject": subject,
        "message": message,
        "createdAt": now_iso(),
    }
    try:
        collection.insert_one(document)
    except PyMongoError as exc:
        _LOGGER.warning("Failed to store contact message: %s", exc)
        return DispatchResult.failure(str(exc))
    return DispatchResult.success()


def add_newsletter_subscriber(email: str) -> DispatchResult:
    """Add an email to the subscriber set; repeated sign-ups are no-ops."""
    collection = database.get_collection("newsletter_subscribers")
    if collection is None:
        return DispatchResult.failure("disabled")

    try:
        collection.update_one(
            {"email": email},
            {"$setOnInsert": {"subscribed_at": datetime.utcnow()}},
            upsert=True,
        )
    except PyMongoError as exc:
        _LOGGER.warning("Failed to store newsletter subscriber: %s", exc)
        return DispatchResult.failure(str(exc))
    return DispatchResult.success()
