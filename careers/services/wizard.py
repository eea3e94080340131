"""Application wizard: validation and step transitions for a draft.

Steps run in a fixed order::

    entry -> draft_started -> interview_pending -> verification_pending
          -> ready_to_submit -> done

Each transition saves the draft and fans out its side effects (chat
notifications, confirmation email, persistence). Side effects are
best-effort: their ``DispatchResult`` values are returned to the caller for
logging and never change which step the draft lands on.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from careers.services import application_service, mail_service, notification_service
from careers.services.draft_service import (
    ApplicationDraft,
    Attachment,
    Verification,
    WizardStep,
    discard_draft,
    new_draft_id,
    save_draft,
)
from careers.services.notification_service import FileAttachment, JsonArtifact, NotificationEvent, TextSummary
from careers.services.position_catalog import find_by_title
from careers.services.question_bank import QuestionSet, questions_for_position
from careers.utils.results import DispatchResult
from careers.utils.text import (
    MAX_COVER_LETTER_LENGTH,
    MAX_NAME_LENGTH,
    clean_field,
    is_valid_email,
    is_valid_phone,
    sanitize_key_fragment,
)

_LOGGER = logging.getLogger(__name__)

POLICY_LENIENT = "lenient"
POLICY_PLACEHOLDER = "placeholder"
POLICY_STRICT = "strict"
ANSWER_POLICIES = (POLICY_LENIENT, POLICY_PLACEHOLDER, POLICY_STRICT)
NO_ANSWER_PLACEHOLDER = "(no answer provided)"


class WizardError(Exception):
    """A request the wizard refuses; rendered back to the applicant."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApplicantValidationError(WizardError):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("Please correct the highlighted fields.")
        self.errors = errors


class IncompleteInterviewError(WizardError):
    def __init__(self, missing: Sequence[str]):
        super().__init__("Please answer every interview question.")
        self.missing = list(missing)


class MissingDocumentsError(WizardError):
    def __init__(self):
        super().__init__("Please upload both the front and the back of your ID document.")


class NotVerifiedError(WizardError):
    def __init__(self):
        super().__init__("Identity verification must be completed before submitting.")


@dataclass
class SubmissionOutcome:
    record: Dict[str, str]
    stored: DispatchResult
    notifications: List[DispatchResult] = field(default_factory=list)


def answer_policy() -> str:
    """Return the configured policy for blank interview answers."""
    policy = os.getenv("INTERVIEW_ANSWER_POLICY", POLICY_LENIENT).strip().lower()
    if policy not in ANSWER_POLICIES:
        _LOGGER.warning("Unknown INTERVIEW_ANSWER_POLICY %r; using %s", policy, POLICY_LENIENT)
        return POLICY_LENIENT
    return policy


def _log_failures(action: str, results: Sequence[DispatchResult]) -> None:
    skipped = [result for result in results if result.skipped]
    failed = [str(result.error) for result in results if not result.ok and not result.skipped]
    if skipped:
        _LOGGER.info("%s: %d side effects skipped (integration not configured)", action, len(skipped))
    if failed:
        _LOGGER.warning(
            "%s: %d of %d side effects failed (%s)", action, len(failed), len(results), "; ".join(failed)
        )


# ---------------------------------------------------------------------------
# Entry -> DraftStarted
# ---------------------------------------------------------------------------


def validate_applicant(form: Mapping[str, str]) -> Dict[str, str]:
    """Return cleaned applicant fields or raise ApplicantValidationError."""
    fields = {
        "first_name": clean_field(form.get("firstName")),
        "last_name": clean_field(form.get("lastName")),
        "email": clean_field(form.get("email")).lower(),
        "phone": clean_field(form.get("phone")),
        "position": clean_field(form.get("position")),
        "cover_letter": clean_field(form.get("coverLetter")),
    }

    errors: Dict[str, str] = {}
    for key, label in (("first_name", "First name"), ("last_name", "Last name")):
        if not fields[key]:
            errors[key] = f"{label} is required."
        elif len(fields[key]) > MAX_NAME_LENGTH:
            errors[key] = f"{label} must be at most {MAX_NAME_LENGTH} characters."
    if not is_valid_email(fields["email"]):
        errors["email"] = "Enter a valid email address."
    if fields["phone"] and not is_valid_phone(fields["phone"]):
        errors["phone"] = "Enter a valid phone number."
    if not fields["position"]:
        errors["position"] = "Choose the position you are applying for."
    elif len(fields["position"]) > MAX_NAME_LENGTH * 2:
        errors["position"] = "Position is too long."
    if len(fields["cover_letter"]) > MAX_COVER_LETTER_LENGTH:
        errors["cover_letter"] = f"Cover letter must be at most {MAX_COVER_LETTER_LENGTH} characters."

    if errors:
        raise ApplicantValidationError(errors)
    return fields


def _start_notifications(draft: ApplicationDraft) -> List[NotificationEvent]:
    summary = (
        "New Application\n"
        f"Name: {draft.full_name}\n"
        f"Email: {draft.email}\n"
        f"Phone: {draft.phone or '-'}\n"
        f"Position: {draft.position}\n"
        f"Attachments: {len(draft.attachments)}"
    )
    if draft.cover_letter:
        summary += f"\nCover letter:\n{draft.cover_letter}"

    events: List[NotificationEvent] = [TextSummary(summary)]
    for attachment in draft.attachments:
        events.append(
            FileAttachment(
                path=attachment.storage_path,
                filename=attachment.original_name,
                mime_type=attachment.mime_type,
                caption=f"{draft.full_name}: {attachment.original_name}",
            )
        )
    return events


def start_application(fields: Mapping[str, str], attachments: Sequence[Attachment]) -> ApplicationDraft:
    """Create the draft, announce it and move it to the interview step.

    ``attachments`` must still exist on disk; the caller deletes them once
    this returns.
    """
    # Catalog positions are stored under their canonical title; free text is kept as typed.
    listing = find_by_title(fields["position"])
    draft = ApplicationDraft(
        draft_id=new_draft_id(),
        first_name=fields["first_name"],
        last_name=fields["last_name"],
        email=fields["email"],
        phone=fields.get("phone", ""),
        position=listing.title if listing else fields["position"],
        position_key=listing.key if listing else "",
        cover_letter=fields.get("cover_letter", ""),
        attachments=list(attachments),
        step=WizardStep.DRAFT_STARTED,
    )

    _log_failures("start", notification_service.send_all(_start_notifications(draft)))

    draft.step = WizardStep.INTERVIEW_PENDING
    save_draft(draft)
    _LOGGER.info("Draft %s started for position %r", draft.draft_id, draft.position)
    return draft


# ---------------------------------------------------------------------------
# InterviewPending
# ---------------------------------------------------------------------------


def questions_for_draft(draft: ApplicationDraft) -> QuestionSet:
    """Derive the question set from the stored position on every call."""
    return questions_for_position(draft.position)


def collect_answers(questions: QuestionSet, form: Mapping[str, str], policy: str) -> Dict[str, str]:
    answers: Dict[str, str] = {}
    missing: List[str] = []
    for question in questions:
        answer = clean_field(form.get(question.key))
        if not answer:
            if policy == POLICY_STRICT:
                missing.append(question.key)
            elif policy == POLICY_PLACEHOLDER:
                answer = NO_ANSWER_PLACEHOLDER
        answers[question.key] = answer

    if missing:
        raise IncompleteInterviewError(missing)
    return answers


def record_interview(
    draft: ApplicationDraft,
    form: Mapping[str, str],
    policy: Optional[str] = None,
) -> ApplicationDraft:
    """Store one answer per question key and move on to verification."""
    answers = collect_answers(questions_for_draft(draft), form, policy or answer_policy())
    draft.interview_answers = answers
    if not draft.verification.is_verified:
        draft.step = WizardStep.VERIFICATION_PENDING
    save_draft(draft)
    return draft


def interview_complete(draft: ApplicationDraft) -> bool:
    """True when every key of the active question set has an answer entry."""
    return all(question.key in draft.interview_answers for question in questions_for_draft(draft))


def interview_transcript(draft: ApplicationDraft) -> List[Dict[str, str]]:
    return [
        {"key": question.key, "question": question.prompt, "answer": draft.interview_answers.get(question.key, "")}
        for question in questions_for_draft(draft)
    ]


# ---------------------------------------------------------------------------
# VerificationPending -> ReadyToSubmit
# ---------------------------------------------------------------------------


def _artifact_name(kind: str, draft: ApplicationDraft) -> str:
    return f"{kind}-{sanitize_key_fragment(draft.full_name) or 'applicant'}.json"


def _identity_artifact(draft: ApplicationDraft) -> JsonArtifact:
    verification = draft.verification
    drivers_license = None
    if verification.id_document_front and verification.id_document_back:
        drivers_license = {
            "front": verification.id_document_front.describe(),
            "back": verification.id_document_back.describe(),
        }
    payload = {
        "applicant": draft.applicant(),
        "idme_credentials": verification.profile or None,
        "drivers_license": drivers_license,
    }
    return JsonArtifact(_artifact_name("identity", draft), payload, caption=f"{draft.full_name}: identity")


def _answers_artifact(draft: ApplicationDraft) -> JsonArtifact:
    payload = {"applicant": draft.applicant(), "interview_answers": interview_transcript(draft)}
    return JsonArtifact(_artifact_name("interview", draft), payload, caption=f"{draft.full_name}: interview answers")


def _finish_verification(draft: ApplicationDraft, events: List[NotificationEvent]) -> ApplicationDraft:
    draft.step = WizardStep.READY_TO_SUBMIT
    save_draft(draft)
    _log_failures("verification", notification_service.send_all(events))
    _log_failures("verification email", [mail_service.send_confirmation(draft)])
    return draft


def complete_identity_provider_verification(draft: ApplicationDraft, profile: Mapping[str, object]) -> ApplicationDraft:
    """Mark the draft verified by the identity provider and announce it."""
    draft.verification = Verification.via_identity_provider(dict(profile))
    events: List[NotificationEvent] = [
        TextSummary(
            "ID.me verification completed\n"
            f"Name: {draft.full_name}\n"
            f"Email: {draft.email}\n"
            f"Position: {draft.position}"
        ),
        _identity_artifact(draft),
    ]
    return _finish_verification(draft, events)


def complete_skip_verification(
    draft: ApplicationDraft,
    front: Optional[Attachment],
    back: Optional[Attachment],
) -> ApplicationDraft:
    """Accept uploaded ID documents in place of the identity provider.

    Both documents are required; with either missing the draft is left
    untouched. The files must still be on disk while this runs.
    """
    if front is None or back is None:
        raise MissingDocumentsError()

    draft.verification = Verification.via_skip(front, back)
    events: List[NotificationEvent] = [
        _answers_artifact(draft),
        _identity_artifact(draft),
        FileAttachment(front.storage_path, front.original_name, front.mime_type, caption=f"{draft.full_name}: ID front"),
        FileAttachment(back.storage_path, back.original_name, back.mime_type, caption=f"{draft.full_name}: ID back"),
    ]
    return _finish_verification(draft, events)


# ---------------------------------------------------------------------------
# ReadyToSubmit -> Done
# ---------------------------------------------------------------------------


def submit_application(draft: ApplicationDraft) -> SubmissionOutcome:
    """Persist and announce the final application, then discard the draft."""
    if not draft.verification.is_verified:
        raise NotVerifiedError()

    record = application_service.build_application_record(draft)
    stored = application_service.store_application(record)
    if not stored.ok:
        _LOGGER.warning("Application %s not persisted: %s", record["key"], stored.error)

    summary = (
        "Application submitted\n"
        f"Name: {draft.full_name}\n"
        f"Email: {draft.email}\n"
        f"Phone: {draft.phone or '-'}\n"
        f"Position: {draft.position}\n"
        f"Verification: {draft.verification.kind.value}\n"
        f"Reference: {record['key']}"
    )
    notifications = notification_service.send_all([TextSummary(summary)])
    _log_failures("submit", notifications)

    draft.step = WizardStep.DONE
    discard_draft(draft.draft_id)
    _LOGGER.info("Draft %s submitted as %s", draft.draft_id, record["key"])
    return SubmissionOutcome(record=record, stored=stored, notifications=notifications)
