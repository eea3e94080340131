"""Service for writing finalized applications to MongoDB.

This is a secondary audit trail, not the system of record: writes are
best-effort and every failure is logged and reported, never raised.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from careers import database
from careers.services.draft_service import ApplicationDraft
from careers.utils.auth import now_iso, now_millis
from careers.utils.results import DispatchResult
from careers.utils.text import sanitize_key_fragment

_LOGGER = logging.getLogger(__name__)


def _get_applications_collection() -> Optional[Collection]:
    return database.get_collection("applications")


def build_application_key(email: str, timestamp_ms: Optional[int] = None) -> str:
    """Return ``application:<millis>:<email>`` with the email reduced to [A-Za-z0-9_].

    Two submissions from the same sanitized email within one millisecond
    share a key; acceptable for an audit trail.
    """
    millis = timestamp_ms if timestamp_ms is not None else now_millis()
    return f"application:{millis}:{sanitize_key_fragment(email)}"


def build_application_record(draft: ApplicationDraft, key: Optional[str] = None) -> Dict[str, Any]:
    """Flatten a verified draft into the stored record shape."""
    return {
        "key": key or build_application_key(draft.email),
        "firstName": draft.first_name,
        "lastName": draft.last_name,
        "email": draft.email,
        "phone": draft.phone,
        "position": draft.position,
        "positionKey": draft.position_key,
        "coverLetter": draft.cover_letter or "",
        "interviewAnswers": json.dumps(draft.interview_answers),
        "files": json.dumps([attachment.describe() for attachment in draft.attachments]),
        "verification": json.dumps(draft.verification.to_payload(), default=str),
        "createdAt": now_iso(),
    }


def store_application(record: Dict[str, Any]) -> DispatchResult:
    """Upsert the record by key; never raises."""
    collection = _get_applications_collection()
    if collection is None:
        return DispatchResult.failure("disabled")

    try:
        collection.update_one(
            {"key": record["key"]},
            {"$set": {**record, "stored_at": datetime.utcnow()}},
            upsert=True,
        )
    except PyMongoError as exc:
        _LOGGER.warning("Application store failed for %s: %s", record.get("key"), exc)
        return DispatchResult.failure(str(exc))

    return DispatchResult.success()


def create_indexes() -> None:
    """Create the unique key index used by the upsert."""
    collection = _get_applications_collection()
    if collection is not None:
        collection.create_index("key", unique=True)
