"""/quick-apply: a single-step résumé submission outside the wizard."""

from __future__ import annotations

from flask import Blueprint, current_app, render_template, request

from careers.services import notification_service
from careers.services.notification_service import FileAttachment, TextSummary
from careers.utils.text import clean_field, is_valid_email
from careers.utils.uploads import is_present, staged_uploads

bp = Blueprint("quick_apply", __name__)


@bp.post("/quick-apply")
def quick_apply():
    name = clean_field(request.form.get("name"))
    email = clean_field(request.form.get("email"))
    message = clean_field(request.form.get("message"))
    resume = request.files.get("resume")

    if not is_valid_email(email) or not is_present(resume):
        return render_template("error.html", message="Please provide your email and attach a résumé."), 400

    with staged_uploads([resume], current_app.config["UPLOAD_FOLDER"], max_files=1) as staged:
        notification_service.send_all(
            [
                TextSummary(
                    f"New Quick Apply Submission:\nName: {name}\nEmail: {email}\nMessage: {message or '(none)'}"
                ),
                FileAttachment(
                    path=staged[0].storage_path,
                    filename=staged[0].original_name,
                    mime_type=staged[0].mime_type,
                    caption=f"{name or email}'s Resume",
                ),
            ]
        )

    return render_template("thanks.html", name=name), 200
