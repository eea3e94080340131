"""Shared pytest fixtures for the careers application."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Callable, List

import httpx
import mongomock
import pytest

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from careers import database  # noqa: E402
from careers.main import create_app  # noqa: E402
from careers.services import idme_service, notification_service  # noqa: E402
from careers.storage import drafts, unsynced_drafts  # noqa: E402


@pytest.fixture(autouse=True)
def mongo_db(monkeypatch: pytest.MonkeyPatch):
    """Provide an isolated in-memory MongoDB database for each test."""
    test_db_name = "test_corecrew_careers"
    monkeypatch.setenv("ENABLE_MONGODB", "true")
    monkeypatch.setenv("MONGODB_DATABASE", test_db_name)

    client = mongomock.MongoClient()
    db = client[test_db_name]

    monkeypatch.setattr(database, "get_mongo_client", lambda: client)
    monkeypatch.setattr(database, "get_database", lambda: db)

    yield db

    client.drop_database(test_db_name)


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch: pytest.MonkeyPatch):
    """Reset in-process stores and keep outbound integrations unconfigured by default."""
    for name in (
        "TELEGRAM_BOT_TOKEN",
        "TELEGRAM_CHAT_ID",
        "SMTP_HOST",
        "MAIL_FROM",
        "IDME_ISSUER",
        "IDME_CLIENT_ID",
        "IDME_CLIENT_SECRET",
        "IDME_REDIRECT_URI",
        "INTERVIEW_ANSWER_POLICY",
        "HEALTHZ_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    drafts.clear()
    unsynced_drafts.clear()
    idme_service.clear_metadata_cache()
    yield
    drafts.clear()
    unsynced_drafts.clear()
    idme_service.clear_metadata_cache()


class TelegramRecorder:
    """Captures requests sent to the Telegram Bot API through a mock transport."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        # Read the body while any streamed file handle is still open.
        request.read()
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("chat API unreachable", request=request)
        return httpx.Response(200, json={"ok": True, "result": {}})

    def methods(self) -> List[str]:
        return [request.url.path.rsplit("/", 1)[-1] for request in self.requests]


@pytest.fixture
def telegram(monkeypatch: pytest.MonkeyPatch) -> TelegramRecorder:
    """Configure the chat API and route its traffic to an in-process recorder."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:test-token")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "-1000")
    recorder = TelegramRecorder()
    monkeypatch.setattr(
        notification_service,
        "_build_client",
        lambda: httpx.Client(transport=httpx.MockTransport(recorder.handler)),
    )
    return recorder


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def app(upload_dir: Path):
    app = create_app({"TESTING": True, "SECRET_KEY": "test-secret", "UPLOAD_FOLDER": str(upload_dir)})
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_file() -> Callable[..., tuple]:
    """Build a (stream, filename, mimetype) tuple for multipart test requests."""

    def _make(filename: str = "resume.pdf", content: bytes = b"%PDF-1.4 test", mimetype: str = "application/pdf"):
        return (io.BytesIO(content), filename, mimetype)

    return _make
