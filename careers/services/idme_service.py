"""ID.me OpenID Connect client: Authorization Code flow with PKCE.

Provider endpoints are discovered from
``{IDME_ISSUER}/.well-known/openid-configuration`` and cached for the life of
the process. Token exchange and user-info failures are not retried; the
``httpx.HTTPStatusError`` propagates to the caller.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from careers.utils.auth import tokens_match

_LOGGER = logging.getLogger(__name__)

# HTTP client timeout for discovery, token exchange and user-info
IDME_HTTP_TIMEOUT = 10.0

DEFAULT_SCOPE = "openid email profile"


class IdentityProviderError(Exception):
    """Protocol-level failure of the identity provider flow."""


@dataclass(frozen=True)
class ProviderMetadata:
    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: str


_metadata_cache: Dict[str, ProviderMetadata] = {}


def _settings() -> Dict[str, str]:
    return {
        "issuer": (os.getenv("IDME_ISSUER") or "").rstrip("/"),
        "client_id": os.getenv("IDME_CLIENT_ID") or "",
        "client_secret": os.getenv("IDME_CLIENT_SECRET") or "",
        "redirect_uri": os.getenv("IDME_REDIRECT_URI") or "",
        "scope": os.getenv("IDME_SCOPE") or DEFAULT_SCOPE,
    }


def is_configured() -> bool:
    """ID.me is usable once issuer, client id and redirect URI are all set."""
    settings = _settings()
    return bool(settings["issuer"] and settings["client_id"] and settings["redirect_uri"])


def _build_client() -> httpx.Client:
    return httpx.Client(timeout=IDME_HTTP_TIMEOUT)


def clear_metadata_cache() -> None:
    _metadata_cache.clear()


def discover() -> ProviderMetadata:
    """Fetch (once) and return the provider's OpenID configuration."""
    issuer = _settings()["issuer"]
    if not issuer:
        raise IdentityProviderError("IDME_ISSUER is not set")

    cached = _metadata_cache.get(issuer)
    if cached is not None:
        return cached

    with _build_client() as client:
        resp = client.get(f"{issuer}/.well-known/openid-configuration")
        resp.raise_for_status()
        document = resp.json()

    try:
        metadata = ProviderMetadata(
            authorization_endpoint=document["authorization_endpoint"],
            token_endpoint=document["token_endpoint"],
            userinfo_endpoint=document["userinfo_endpoint"],
        )
    except KeyError as exc:
        raise IdentityProviderError(f"Provider metadata is missing {exc.args[0]}") from exc

    _metadata_cache[issuer] = metadata
    return metadata


def build_authorization_url(state: str, code_challenge: str) -> str:
    """Return the provider URL the applicant is redirected to."""
    settings = _settings()
    metadata = discover()
    params = {
        "response_type": "code",
        "client_id": settings["client_id"],
        "redirect_uri": settings["redirect_uri"],
        "scope": settings["scope"],
        "state": state,
        "code_challenge": code_challenge,
        "code_challenge_method": "S256",
    }
    separator = "&" if "?" in metadata.authorization_endpoint else "?"
    return f"{metadata.authorization_endpoint}{separator}{urlencode(params)}"


def exchange_code(code: str, code_verifier: str) -> Dict[str, Any]:
    """Exchange an authorization code for tokens.

    Raises:
        httpx.HTTPStatusError: If the token endpoint rejects the exchange.
        IdentityProviderError: If the response carries no access token.
    """
    settings = _settings()
    metadata = discover()

    with _build_client() as client:
        resp = client.post(
            metadata.token_endpoint,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": settings["redirect_uri"],
                "client_id": settings["client_id"],
                "client_secret": settings["client_secret"],
                "code_verifier": code_verifier,
            },
        )
        resp.raise_for_status()
        tokens: Dict[str, Any] = resp.json()

    if not tokens.get("access_token"):
        raise IdentityProviderError("Token response did not include an access token")
    return tokens


def fetch_userinfo(access_token: str) -> Dict[str, Any]:
    """Fetch the verified profile for an access token."""
    metadata = discover()

    with _build_client() as client:
        resp = client.get(
            metadata.userinfo_endpoint,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        resp.raise_for_status()
        profile: Dict[str, Any] = resp.json()

    return profile


def complete_callback(
    *,
    expected_state: Optional[str],
    returned_state: Optional[str],
    code: Optional[str],
    code_verifier: Optional[str],
    error: Optional[str] = None,
) -> Dict[str, Any]:
    """Validate the callback and return the user-info profile.

    State is checked before any request leaves the process; a mismatch fails
    closed with ``IdentityProviderError``.
    """
    if error:
        raise IdentityProviderError(f"Identity provider returned an error: {error}")
    if not expected_state or not tokens_match(expected_state, returned_state or ""):
        raise IdentityProviderError("Invalid OAuth state")
    if not code or not code_verifier:
        raise IdentityProviderError("Missing authorization code")

    tokens = exchange_code(code, code_verifier)
    profile = fetch_userinfo(tokens["access_token"])
    _LOGGER.info("ID.me verification completed")
    return profile
