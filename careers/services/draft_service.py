"""Application draft model and its server-side store.

A draft lives in the in-memory ``drafts`` map for fast access and, when
MongoDB is enabled, is mirrored into the ``drafts`` collection so that a
restarted or second worker can pick it up again.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from careers import database
from careers.storage import drafts, unsynced_drafts
from careers.utils.auth import generate_token, now_seconds

_LOGGER = logging.getLogger(__name__)

DEFAULT_DRAFT_TTL_SECONDS = 24 * 60 * 60


class WizardStep(str, Enum):
    ENTRY = "entry"
    DRAFT_STARTED = "draft_started"
    INTERVIEW_PENDING = "interview_pending"
    VERIFICATION_PENDING = "verification_pending"
    READY_TO_SUBMIT = "ready_to_submit"
    DONE = "done"


class VerificationKind(str, Enum):
    UNVERIFIED = "unverified"
    IDENTITY_PROVIDER = "identity_provider"
    SKIP = "skip"


@dataclass
class Attachment:
    storage_path: str
    original_name: str
    mime_type: str
    size: int = 0

    def describe(self) -> Dict[str, str]:
        """Metadata safe to persist or forward; the temp path is left out."""
        return {"name": self.original_name, "type": self.mime_type}


@dataclass
class Verification:
    kind: VerificationKind = VerificationKind.UNVERIFIED
    profile: Dict[str, Any] = field(default_factory=dict)
    id_document_front: Optional[Attachment] = None
    id_document_back: Optional[Attachment] = None

    @property
    def is_verified(self) -> bool:
        return self.kind != VerificationKind.UNVERIFIED

    @classmethod
    def via_identity_provider(cls, profile: Dict[str, Any]) -> "Verification":
        return cls(kind=VerificationKind.IDENTITY_PROVIDER, profile=dict(profile))

    @classmethod
    def via_skip(cls, front: Attachment, back: Attachment) -> "Verification":
        return cls(kind=VerificationKind.SKIP, id_document_front=front, id_document_back=back)

    def to_payload(self) -> Dict[str, Any]:
        """Describe the verification for notifications and the persisted record."""
        payload: Dict[str, Any] = {"method": self.kind.value}
        if self.kind == VerificationKind.IDENTITY_PROVIDER:
            payload["profile"] = self.profile
        elif self.kind == VerificationKind.SKIP:
            payload["documents"] = [
                doc.describe() for doc in (self.id_document_front, self.id_document_back) if doc
            ]
        return payload


@dataclass
class ApplicationDraft:
    draft_id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    position: str
    position_key: str = ""
    cover_letter: str = ""
    attachments: List[Attachment] = field(default_factory=list)
    interview_answers: Dict[str, str] = field(default_factory=dict)
    verification: Verification = field(default_factory=Verification)
    step: WizardStep = WizardStep.DRAFT_STARTED
    created_at: int = field(default_factory=now_seconds)
    updated_at: int = field(default_factory=now_seconds)
    expires_at: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def applicant(self) -> Dict[str, str]:
        """Identity fields in the shape used by outbound payloads."""
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "position": self.position,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["step"] = self.step.value
        data["verification"]["kind"] = self.verification.kind.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApplicationDraft":
        verification_data = dict(data.get("verification") or {})
        front = verification_data.get("id_document_front")
        back = verification_data.get("id_document_back")
        verification = Verification(
            kind=VerificationKind(verification_data.get("kind", VerificationKind.UNVERIFIED.value)),
            profile=verification_data.get("profile") or {},
            id_document_front=Attachment(**front) if front else None,
            id_document_back=Attachment(**back) if back else None,
        )
        return cls(
            draft_id=data["draft_id"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            position=data.get("position", ""),
            position_key=data.get("position_key", ""),
            cover_letter=data.get("cover_letter", ""),
            attachments=[Attachment(**item) for item in data.get("attachments") or []],
            interview_answers=dict(data.get("interview_answers") or {}),
            verification=verification,
            step=WizardStep(data.get("step", WizardStep.DRAFT_STARTED.value)),
            created_at=data.get("created_at", 0),
            updated_at=data.get("updated_at", 0),
            expires_at=data.get("expires_at", 0),
        )


def draft_ttl_seconds() -> int:
    try:
        return int(os.getenv("DRAFT_TTL_SECONDS", DEFAULT_DRAFT_TTL_SECONDS))
    except ValueError:
        return DEFAULT_DRAFT_TTL_SECONDS


def new_draft_id() -> str:
    return generate_token("draft")


def _get_drafts_collection() -> Optional[Collection]:
    return database.get_collection("drafts")


def _mirror(collection: Collection, document: Dict[str, Any]) -> bool:
    """Upsert a draft document into MongoDB; False when the write failed."""
    draft_id = document["draft_id"]
    try:
        collection.update_one(
            {"draft_id": draft_id},
            {"$set": {**document, "saved_at": datetime.utcnow()}},
            upsert=True,
        )
    except PyMongoError:
        _LOGGER.warning("Failed to mirror draft %s to MongoDB", draft_id, exc_info=True)
        unsynced_drafts.add(draft_id)
        return False

    unsynced_drafts.discard(draft_id)
    return True


def save_draft(draft: ApplicationDraft) -> ApplicationDraft:
    """Store the draft, refreshing its expiry. Concurrent writers: last write wins."""
    current = now_seconds()
    draft.updated_at = current
    draft.expires_at = current + draft_ttl_seconds()
    document = draft.to_dict()
    drafts[draft.draft_id] = document

    collection = _get_drafts_collection()
    if collection is not None:
        _mirror(collection, document)

    return draft


def load_draft(draft_id: Optional[str]) -> Optional[ApplicationDraft]:
    """Return the live draft for an id, or None when it is unknown or expired."""
    if not draft_id:
        return None

    document = drafts.get(draft_id)
    collection = _get_drafts_collection()
    if collection is not None:
        if document is not None and draft_id in unsynced_drafts:
            # The cached copy holds writes MongoDB never received; push them again.
            _mirror(collection, document)
        else:
            # Otherwise MongoDB is authoritative so every worker sees the latest step.
            try:
                document = collection.find_one({"draft_id": draft_id}, {"_id": 0, "saved_at": 0})
            except PyMongoError:
                _LOGGER.warning("Failed to load draft %s from MongoDB; using cached copy", draft_id, exc_info=True)
            else:
                if document:
                    drafts[draft_id] = document
                else:
                    drafts.pop(draft_id, None)

    if not document:
        return None

    if document.get("expires_at", 0) <= now_seconds():
        discard_draft(draft_id)
        return None

    return ApplicationDraft.from_dict(document)


def discard_draft(draft_id: Optional[str]) -> None:
    if not draft_id:
        return

    drafts.pop(draft_id, None)
    unsynced_drafts.discard(draft_id)
    collection = _get_drafts_collection()
    if collection is not None:
        try:
            collection.delete_one({"draft_id": draft_id})
        except PyMongoError:
            _LOGGER.warning("Failed to delete draft %s from MongoDB", draft_id, exc_info=True)


def prune_expired_drafts() -> int:
    """Remove abandoned drafts whose expiry has passed; return how many records were dropped."""
    current = now_seconds()
    removed = 0

    for draft_id, document in list(drafts.items()):
        if document.get("expires_at", 0) <= current:
            drafts.pop(draft_id, None)
            unsynced_drafts.discard(draft_id)
            removed += 1

    collection = _get_drafts_collection()
    if collection is not None:
        try:
            result = collection.delete_many({"expires_at": {"$lte": current}})
            removed += result.deleted_count
        except PyMongoError:
            _LOGGER.warning("Failed to prune expired drafts from MongoDB", exc_info=True)

    return removed
