"""Fire-and-forget delivery of application events to the Telegram Bot API.

``send`` never raises: every failure is logged and reported through the
returned ``DispatchResult`` so the applicant's request carries on regardless
of whether the chat API is reachable.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import httpx

from careers.utils.results import DispatchResult

_LOGGER = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"

# Applied to every outbound call so a slow chat API cannot stall a request.
NOTIFY_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class TextSummary:
    text: str


@dataclass(frozen=True)
class JsonArtifact:
    filename: str
    payload: Dict[str, Any]
    caption: Optional[str] = None


@dataclass(frozen=True)
class FileAttachment:
    path: str
    filename: str
    mime_type: str = "application/octet-stream"
    caption: Optional[str] = None


NotificationEvent = Union[TextSummary, JsonArtifact, FileAttachment]


def _credentials() -> Optional[Tuple[str, str]]:
    bot_token = os.getenv("TELEGRAM_BOT_TOKEN")
    chat_id = os.getenv("TELEGRAM_CHAT_ID")
    if not bot_token or not chat_id:
        return None
    return bot_token, chat_id


def is_configured() -> bool:
    return _credentials() is not None


def _build_client() -> httpx.Client:
    """Create the HTTP client used for one dispatch."""
    return httpx.Client(timeout=NOTIFY_TIMEOUT_SECONDS)


def _method_url(bot_token: str, method: str) -> str:
    return f"{TELEGRAM_API_BASE}/bot{bot_token}/{method}"


def _post(client: httpx.Client, bot_token: str, chat_id: str, event: NotificationEvent) -> httpx.Response:
    if isinstance(event, TextSummary):
        return client.post(
            _method_url(bot_token, "sendMessage"),
            json={"chat_id": chat_id, "text": event.text},
        )

    data: Dict[str, str] = {"chat_id": chat_id}
    if event.caption:
        data["caption"] = event.caption

    if isinstance(event, JsonArtifact):
        body = json.dumps(event.payload, indent=2, default=str).encode("utf-8")
        return client.post(
            _method_url(bot_token, "sendDocument"),
            data=data,
            files={"document": (event.filename, body, "application/json")},
        )

    with open(event.path, "rb") as handle:
        return client.post(
            _method_url(bot_token, "sendDocument"),
            data=data,
            files={"document": (event.filename, handle, event.mime_type)},
        )


def _describe(event: NotificationEvent) -> str:
    if isinstance(event, TextSummary):
        return "text summary"
    return f"{type(event).__name__} {event.filename}"


def send(event: NotificationEvent) -> DispatchResult:
    """Deliver a single event; never raises."""
    credentials = _credentials()
    if credentials is None:
        _LOGGER.info("Telegram not configured; skipping %s", _describe(event))
        return DispatchResult.not_configured()

    bot_token, chat_id = credentials
    try:
        with _build_client() as client:
            response = _post(client, bot_token, chat_id, event)
            response.raise_for_status()
    except (httpx.HTTPError, OSError) as exc:
        _LOGGER.warning("Telegram delivery failed for %s: %s", _describe(event), exc)
        return DispatchResult.failure(str(exc) or type(exc).__name__)
    except Exception as exc:  # pragma: no cover - last-resort guard for the caller
        _LOGGER.exception("Unexpected error delivering %s", _describe(event))
        return DispatchResult.failure(str(exc) or type(exc).__name__)

    return DispatchResult.success()


def send_all(events: Iterable[NotificationEvent]) -> List[DispatchResult]:
    """Send events in order without retries; partial delivery is accepted."""
    return [send(event) for event in events]
