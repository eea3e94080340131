"""/apply routes walking an applicant through the application wizard."""

from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, session, url_for

from careers.services import idme_service, wizard
from careers.services.draft_service import discard_draft
from careers.services.position_catalog import list_positions
from careers.utils.session import (
    DRAFT_SESSION_KEY,
    bind_draft,
    clear_draft,
    require_draft,
    require_verified_draft,
)
from careers.utils.uploads import MAX_APPLICATION_FILES, is_present, staged_uploads

bp = Blueprint("apply", __name__, url_prefix="/apply")


def _upload_dir() -> str:
    return current_app.config["UPLOAD_FOLDER"]


def _render_start_form(form=None, errors=None, status: int = 200):
    return (
        render_template(
            "apply.html",
            positions=list_positions(),
            form=form or {},
            errors=errors or {},
            max_files=MAX_APPLICATION_FILES,
        ),
        status,
    )


def _render_interview(draft, errors=None, status: int = 200):
    return (
        render_template(
            "interview.html",
            draft=draft,
            questions=wizard.questions_for_draft(draft),
            answers=draft.interview_answers,
            missing=errors or [],
        ),
        status,
    )


@bp.get("")
def entry():
    """Show the open positions and the start form."""
    return _render_start_form()


@bp.post("/start")
def start():
    """Create the draft from identity fields and attachments, then show the interview."""
    try:
        fields = wizard.validate_applicant(request.form)
    except wizard.ApplicantValidationError as exc:
        return _render_start_form(request.form, exc.errors, 400)

    with staged_uploads(request.files.getlist("documents"), _upload_dir()) as attachments:
        draft = wizard.start_application(fields, attachments)

    discard_draft(session.get(DRAFT_SESSION_KEY))
    clear_draft()
    bind_draft(draft)
    return _render_interview(draft)


@bp.get("/interview")
def interview():
    """Re-render the question set derived from the stored position."""
    draft, error_response = require_draft()
    if error_response is not None:
        return error_response

    return _render_interview(draft)


@bp.post("/interview")
def submit_interview():
    """Capture one answer per question and continue to verification."""
    draft, error_response = require_draft()
    if error_response is not None:
        return error_response

    try:
        wizard.record_interview(draft, request.form)
    except wizard.IncompleteInterviewError as exc:
        draft.interview_answers = {key: value for key, value in request.form.items()}
        return _render_interview(draft, exc.missing, 400)

    return redirect(url_for("apply.verify"))


@bp.get("/verify")
def verify():
    """Offer ID.me (when configured) and the document upload alternative."""
    draft, error_response = require_draft()
    if error_response is not None:
        return error_response

    if not wizard.interview_complete(draft):
        return redirect(url_for("apply.interview"))

    return render_template("verify.html", draft=draft, idme_enabled=idme_service.is_configured())


def _verify_with_documents():
    draft, error_response = require_draft()
    if error_response is not None:
        return error_response

    if not wizard.interview_complete(draft):
        return redirect(url_for("apply.interview"))

    front = request.files.get("idFront")
    back = request.files.get("idBack")
    if not (is_present(front) and is_present(back)):
        raise wizard.MissingDocumentsError()

    with staged_uploads([front, back], _upload_dir(), max_files=2) as documents:
        wizard.complete_skip_verification(draft, documents[0], documents[1])

    return redirect(url_for("apply.submit"))


@bp.post("/verify")
def verify_documents():
    """Verify with uploaded front/back ID documents."""
    return _verify_with_documents()


@bp.post("/skip-idme")
def skip_idme():
    """Alternate entry point for the document upload path."""
    return _verify_with_documents()


@bp.get("/submit")
def submit():
    """Show the final confirmation screen."""
    draft, error_response = require_verified_draft()
    if error_response is not None:
        return error_response

    return render_template("submit.html", draft=draft, transcript=wizard.interview_transcript(draft))


@bp.post("/submit")
def finalize():
    """Persist, announce and clear the draft."""
    draft, error_response = require_verified_draft()
    if error_response is not None:
        return error_response

    outcome = wizard.submit_application(draft)
    clear_draft()
    current_app.logger.info("Application submitted: %s", outcome.record["key"])
    return render_template("success.html", first_name=draft.first_name, position=draft.position), 200
