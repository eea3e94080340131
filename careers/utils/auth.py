"""Token, timestamp and PKCE helpers shared by the session and OAuth code."""

from __future__ import annotations

import base64
import hashlib
import secrets
import time
from datetime import datetime, timezone

# PKCE code verifier length (RFC 7636 allows 43-128)
CODE_VERIFIER_LENGTH = 128

# Characters allowed in a PKCE code verifier (RFC 7636 §4.1)
_UNRESERVED_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"


def now_seconds() -> int:
    """Return the current UNIX timestamp in seconds."""
    return int(time.time())


def now_millis() -> int:
    """Return the current UNIX timestamp in milliseconds."""
    return int(time.time() * 1000)


def now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def generate_token(prefix: str = "draft") -> str:
    """Return a random token with the given prefix suitable for store keys."""
    return f"{prefix}_{secrets.token_urlsafe(12)}"


def generate_code_verifier() -> str:
    """Generate a 128-character PKCE code verifier from unreserved characters."""
    return "".join(secrets.choice(_UNRESERVED_CHARS) for _ in range(CODE_VERIFIER_LENGTH))


def generate_code_challenge(verifier: str) -> str:
    """Return BASE64URL(SHA256(verifier)) without padding (RFC 7636 §4.2)."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_state() -> str:
    """Return an anti-forgery state token for the authorization redirect."""
    return secrets.token_urlsafe(32)


def tokens_match(expected: str, provided: str) -> bool:
    """Compare two secrets in constant time; empty values never match."""
    if not expected or not provided:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))
