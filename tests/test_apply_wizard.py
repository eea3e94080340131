"""End-to-end tests for the /apply wizard and the ID.me callback."""

from __future__ import annotations

import json
import logging
import os
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from careers.services import idme_service
from careers.services.draft_service import VerificationKind, WizardStep, load_draft
from careers.services.question_bank import DEFAULT_QUESTIONS, QUESTION_BANK, Question
from careers.utils.session import DRAFT_SESSION_KEY, OAUTH_SESSION_KEY

WAREHOUSE = "Warehouse Staff & Forklift Operators"
WAREHOUSE_QUESTIONS = QUESTION_BANK["warehouse staff forklift operators"]


def _applicant(**overrides):
    data = {
        "firstName": "Ana",
        "lastName": "Lee",
        "email": "ana@example.com",
        "phone": "+1 (310) 574-2415",
        "position": WAREHOUSE,
        "coverLetter": "I run a tight warehouse.",
    }
    data.update(overrides)
    return data


def _start(client, make_file, files=None, **overrides):
    data = _applicant(**overrides)
    data["documents"] = files if files is not None else [make_file()]
    return client.post("/apply/start", data=data, content_type="multipart/form-data")


def _answers(questions):
    return {question.key: f"answer to {question.key}" for question in questions}


def _session_draft(client):
    with client.session_transaction() as sess:
        return load_draft(sess.get(DRAFT_SESSION_KEY))


def _skip_verify(client, make_file, path="/apply/skip-idme"):
    return client.post(
        path,
        data={
            "idFront": make_file("front.jpg", b"front-bytes", "image/jpeg"),
            "idBack": make_file("back.jpg", b"back-bytes", "image/jpeg"),
        },
        content_type="multipart/form-data",
    )


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/apply/interview"),
        ("post", "/apply/interview"),
        ("get", "/apply/verify"),
        ("post", "/apply/verify"),
        ("post", "/apply/skip-idme"),
        ("get", "/apply/submit"),
        ("post", "/apply/submit"),
        ("get", "/auth/idme"),
        ("get", "/auth/idme/callback"),
    ],
)
def test_steps_without_a_draft_redirect_to_entry(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 302
    assert urlparse(response.headers["Location"]).path == "/apply"


def test_entry_lists_positions(client):
    response = client.get("/apply")

    assert response.status_code == 200
    assert b"Logistics Coordinator / Dispatcher" in response.data


def test_invalid_applicant_is_rejected_without_a_draft(client, make_file, upload_dir):
    response = _start(client, make_file, email="not-an-email", firstName="")

    assert response.status_code == 400
    assert b'data-field="email"' in response.data
    assert b'data-field="first_name"' in response.data
    assert _session_draft(client) is None
    assert os.listdir(upload_dir) == []


def test_start_renders_mapped_questions_and_dispatches_files(client, make_file, telegram, upload_dir):
    response = _start(client, make_file, files=[make_file("cv.pdf"), make_file("cert.pdf")])

    assert response.status_code == 200
    for question in WAREHOUSE_QUESTIONS:
        assert f'name="{question.key}"'.encode() in response.data
    assert telegram.methods() == ["sendMessage", "sendDocument", "sendDocument"]
    assert b"Position: Warehouse Staff & Forklift Operators" in telegram.requests[0].content
    assert os.listdir(upload_dir) == []

    draft = _session_draft(client)
    assert draft.step == WizardStep.INTERVIEW_PENDING
    assert [attachment.original_name for attachment in draft.attachments] == ["cv.pdf", "cert.pdf"]
    assert draft.interview_answers == {}


def test_unmapped_position_gets_default_questions(client, make_file):
    response = _start(client, make_file, position="Account Manager")

    for question in DEFAULT_QUESTIONS:
        assert f'name="{question.key}"'.encode() in response.data


def test_too_many_documents_rejected(client, make_file, upload_dir):
    response = _start(client, make_file, files=[make_file(f"doc{i}.pdf") for i in range(7)])

    assert response.status_code == 400
    assert _session_draft(client) is None
    assert os.listdir(upload_dir) == []


def test_interview_get_is_idempotent(client, make_file):
    _start(client, make_file)

    first = client.get("/apply/interview")
    second = client.get("/apply/interview")

    assert first.status_code == second.status_code == 200
    assert first.data == second.data


def test_interview_questions_follow_bank_changes_on_reload(client, make_file, monkeypatch):
    _start(client, make_file)

    monkeypatch.setitem(
        QUESTION_BANK,
        "warehouse staff forklift operators",
        (Question("night_shift", "Can you work nights?"),),
    )

    response = client.get("/apply/interview")

    assert b'name="night_shift"' in response.data
    assert b'name="forklift_certified"' not in response.data


def test_missing_answers_coerced_to_empty_strings(client, make_file):
    _start(client, make_file)

    response = client.post("/apply/interview", data={"forklift_certified": "Yes, sit-down counterbalance"})

    assert response.status_code == 302
    assert urlparse(response.headers["Location"]).path == "/apply/verify"
    draft = _session_draft(client)
    assert draft.step == WizardStep.VERIFICATION_PENDING
    assert set(draft.interview_answers) == {question.key for question in WAREHOUSE_QUESTIONS}
    assert draft.interview_answers["lifting"] == ""


def test_placeholder_policy_fills_blank_answers(client, make_file, monkeypatch):
    monkeypatch.setenv("INTERVIEW_ANSWER_POLICY", "placeholder")
    _start(client, make_file)

    client.post("/apply/interview", data={})

    assert _session_draft(client).interview_answers["lifting"] == "(no answer provided)"


def test_strict_policy_rejects_blank_answers(client, make_file, monkeypatch):
    monkeypatch.setenv("INTERVIEW_ANSWER_POLICY", "strict")
    _start(client, make_file)

    response = client.post("/apply/interview", data={"lifting": "yes"})

    assert response.status_code == 400
    draft = _session_draft(client)
    assert draft.step == WizardStep.INTERVIEW_PENDING
    assert draft.interview_answers == {}


def test_verify_before_interview_sends_applicant_back(client, make_file):
    _start(client, make_file)

    response = client.get("/apply/verify")

    assert response.status_code == 302
    assert urlparse(response.headers["Location"]).path == "/apply/interview"


@pytest.mark.parametrize("path", ["/apply/verify", "/apply/skip-idme"])
def test_verify_with_one_document_is_a_client_error(client, make_file, telegram, path):
    _start(client, make_file)
    client.post("/apply/interview", data=_answers(WAREHOUSE_QUESTIONS))
    sent_before = len(telegram.requests)

    response = client.post(
        path,
        data={"idFront": make_file("front.jpg", b"front", "image/jpeg")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    draft = _session_draft(client)
    assert draft.verification.kind == VerificationKind.UNVERIFIED
    assert draft.step == WizardStep.VERIFICATION_PENDING
    assert len(telegram.requests) == sent_before


def test_submit_requires_verification(client, make_file):
    _start(client, make_file)
    client.post("/apply/interview", data=_answers(WAREHOUSE_QUESTIONS))

    response = client.post("/apply/submit")

    assert response.status_code == 302
    assert urlparse(response.headers["Location"]).path == "/apply"
    assert _session_draft(client) is not None


def test_end_to_end_skip_path(client, make_file, telegram, upload_dir, mongo_db):
    response = _start(client, make_file)
    assert b'name="forklift_certified"' in response.data

    response = client.post("/apply/interview", data=_answers(WAREHOUSE_QUESTIONS))
    assert response.status_code == 302

    verify_page = client.get("/apply/verify")
    assert verify_page.status_code == 200
    assert b"Verify with ID.me" not in verify_page.data

    sent_before = len(telegram.requests)
    response = _skip_verify(client, make_file)
    assert response.status_code == 302
    assert urlparse(response.headers["Location"]).path == "/apply/submit"
    assert os.listdir(upload_dir) == []

    draft = _session_draft(client)
    assert draft.verification.kind == VerificationKind.SKIP
    assert draft.step == WizardStep.READY_TO_SUBMIT

    skip_requests = telegram.requests[sent_before:]
    assert [request.url.path.rsplit("/", 1)[-1] for request in skip_requests] == ["sendDocument"] * 4
    assert b'"interview_answers"' in skip_requests[0].content
    assert b'"drivers_license"' in skip_requests[1].content
    assert b"front-bytes" in skip_requests[2].content
    assert b"back-bytes" in skip_requests[3].content

    assert client.get("/apply/submit").status_code == 200

    response = client.post("/apply/submit")
    assert response.status_code == 200
    assert b"Thank you, Ana!" in response.data

    stored = mongo_db.applications.find_one({})
    assert stored["key"].endswith(":ana_example_com")
    assert json.loads(stored["verification"])["method"] == "skip"
    assert json.loads(stored["interviewAnswers"])["lifting"] == "answer to lifting"

    response = client.get("/apply/interview")
    assert response.status_code == 302
    assert urlparse(response.headers["Location"]).path == "/apply"
    assert _session_draft(client) is None


def test_submit_completes_when_chat_api_is_down(client, make_file, telegram):
    telegram.fail = True
    _start(client, make_file)
    client.post("/apply/interview", data=_answers(WAREHOUSE_QUESTIONS))
    _skip_verify(client, make_file, path="/apply/verify")

    response = client.post("/apply/submit")

    assert response.status_code == 200
    assert b"Thank you" in response.data
    assert _session_draft(client) is None
    assert telegram.requests


def test_submit_completes_when_persistence_is_down(client, make_file, monkeypatch):
    _start(client, make_file)
    client.post("/apply/interview", data=_answers(WAREHOUSE_QUESTIONS))
    _skip_verify(client, make_file)
    monkeypatch.setenv("ENABLE_MONGODB", "false")

    response = client.post("/apply/submit")

    assert response.status_code == 200


def test_starting_again_replaces_the_previous_draft(client, make_file):
    _start(client, make_file)
    first = _session_draft(client)

    _start(client, make_file, position="Data Entry")
    second = _session_draft(client)

    assert second.draft_id != first.draft_id
    assert load_draft(first.draft_id) is None


# ---------------------------------------------------------------------------
# ID.me path
# ---------------------------------------------------------------------------

ISSUER = "https://idp.example.test"


@pytest.fixture
def idme(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("IDME_ISSUER", ISSUER)
    monkeypatch.setenv("IDME_CLIENT_ID", "client-abc")
    monkeypatch.setenv("IDME_CLIENT_SECRET", "secret-xyz")
    monkeypatch.setenv("IDME_REDIRECT_URI", "http://localhost/auth/idme/callback")
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if request.url.path == "/.well-known/openid-configuration":
            return httpx.Response(
                200,
                json={
                    "authorization_endpoint": f"{ISSUER}/oauth/authorize",
                    "token_endpoint": f"{ISSUER}/oauth/token",
                    "userinfo_endpoint": f"{ISSUER}/api/userinfo",
                },
            )
        if request.url.path == "/oauth/token":
            return httpx.Response(200, json={"access_token": "at-1"})
        if request.url.path == "/api/userinfo":
            return httpx.Response(200, json={"email": "ana@example.com", "verified": True})
        return httpx.Response(404)

    monkeypatch.setattr(idme_service, "_build_client", lambda: httpx.Client(transport=httpx.MockTransport(handler)))
    return calls


def _ready_for_verification(client, make_file):
    _start(client, make_file)
    client.post("/apply/interview", data=_answers(WAREHOUSE_QUESTIONS))


def test_idme_redirect_stores_verifier_and_state(client, make_file, idme):
    _ready_for_verification(client, make_file)

    response = client.get("/auth/idme")

    assert response.status_code == 302
    location = urlparse(response.headers["Location"])
    assert location.netloc == "idp.example.test"
    params = parse_qs(location.query)
    with client.session_transaction() as sess:
        oauth = sess[OAUTH_SESSION_KEY]
    assert params["state"] == [oauth["state"]]
    assert params["code_challenge_method"] == ["S256"]
    assert len(oauth["code_verifier"]) == 128


def test_idme_unconfigured_falls_back_to_verify_page(client, make_file):
    _ready_for_verification(client, make_file)

    response = client.get("/auth/idme")

    assert urlparse(response.headers["Location"]).path == "/apply/verify"


def test_idme_callback_with_forged_state_never_exchanges(client, make_file, idme):
    _ready_for_verification(client, make_file)
    client.get("/auth/idme")
    calls_before = list(idme)

    response = client.get("/auth/idme/callback?code=abc&state=forged")

    assert response.status_code == 400
    assert "/oauth/token" not in idme
    assert idme == calls_before
    assert _session_draft(client).verification.kind == VerificationKind.UNVERIFIED


def test_idme_callback_marks_draft_verified(client, make_file, idme, telegram):
    _ready_for_verification(client, make_file)
    client.get("/auth/idme")
    with client.session_transaction() as sess:
        state = sess[OAUTH_SESSION_KEY]["state"]
    sent_before = len(telegram.requests)

    response = client.get(f"/auth/idme/callback?code=abc&state={state}")

    assert response.status_code == 302
    assert urlparse(response.headers["Location"]).path == "/apply/submit"
    draft = _session_draft(client)
    assert draft.verification.kind == VerificationKind.IDENTITY_PROVIDER
    assert draft.verification.profile["email"] == "ana@example.com"
    with client.session_transaction() as sess:
        assert OAUTH_SESSION_KEY not in sess
    methods = [request.url.path.rsplit("/", 1)[-1] for request in telegram.requests[sent_before:]]
    assert methods == ["sendMessage", "sendDocument"]
    assert b'"idme_credentials"' in telegram.requests[-1].content

    assert client.post("/apply/submit").status_code == 200


def test_idme_token_failure_renders_generic_error(client, make_file, idme, monkeypatch):
    _ready_for_verification(client, make_file)
    client.get("/auth/idme")
    with client.session_transaction() as sess:
        state = sess[OAUTH_SESSION_KEY]["state"]

    def failing_exchange(code, verifier):
        request = httpx.Request("POST", f"{ISSUER}/oauth/token")
        raise httpx.HTTPStatusError("bad grant", request=request, response=httpx.Response(400, request=request))

    monkeypatch.setattr(idme_service, "exchange_code", failing_exchange)

    response = client.get(f"/auth/idme/callback?code=abc&state={state}")

    assert response.status_code == 500
    assert b"Something went wrong" in response.data


# ---------------------------------------------------------------------------
# Position resolution and side-effect logging
# ---------------------------------------------------------------------------


def test_catalog_position_is_stored_under_its_listing(client, make_file, telegram):
    response = _start(client, make_file, position="  warehouse staff / forklift operators ")

    assert b'name="forklift_certified"' in response.data
    draft = _session_draft(client)
    assert draft.position == WAREHOUSE
    assert draft.position_key == "warehouse-staff-forklift"
    assert b"Position: Warehouse Staff & Forklift Operators" in telegram.requests[0].content


def test_free_text_position_is_kept_as_typed(client, make_file):
    _start(client, make_file, position="Night Auditor")

    draft = _session_draft(client)
    assert draft.position == "Night Auditor"
    assert draft.position_key == ""


def test_submitted_record_carries_the_listing_key(client, make_file, mongo_db):
    _start(client, make_file)
    client.post("/apply/interview", data=_answers(WAREHOUSE_QUESTIONS))
    _skip_verify(client, make_file)

    client.post("/apply/submit")

    assert mongo_db.applications.find_one({})["positionKey"] == "warehouse-staff-forklift"


def test_unconfigured_integrations_do_not_log_warnings(client, make_file, caplog):
    caplog.set_level(logging.INFO, logger="careers.services.wizard")

    _start(client, make_file)
    client.post("/apply/interview", data=_answers(WAREHOUSE_QUESTIONS))
    _skip_verify(client, make_file)

    wizard_records = [record for record in caplog.records if record.name == "careers.services.wizard"]
    assert not [record for record in wizard_records if record.levelno >= logging.WARNING]
    assert any("skipped" in record.getMessage() for record in wizard_records)


def test_chat_outage_is_logged_as_a_warning(client, make_file, telegram, caplog):
    telegram.fail = True
    caplog.set_level(logging.INFO, logger="careers.services.wizard")

    _start(client, make_file)

    warnings = [
        record
        for record in caplog.records
        if record.name == "careers.services.wizard" and record.levelno == logging.WARNING
    ]
    assert len(warnings) == 1
    assert "2 of 2 side effects failed" in warnings[0].getMessage()
