"""
Google OAuth 2.0 authorization-code client.

Builds the authorization redirect, exchanges the callback code for tokens,
fetches the userinfo profile and resolves it to one identity record. The
anti-forgery state is a short-lived signed token whose nonce is mirrored in
a cookie by the route layer.
"""

import logging
import secrets
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from jose import JWTError

from config.constants import (
    GOOGLE_AUTHORIZATION_URL,
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
    GOOGLE_SCOPES,
)
from config.env import (
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_CALLBACK_URL,
    GOOGLE_HTTP_TIMEOUT_SECONDS,
)
from utils.errors import ProviderError, ProfileIncomplete
from utils.identity_store import find_or_create_federated_user
from utils.jwt import read_claims, sign_claims

logger = logging.getLogger(__name__)

STATE_PURPOSE = "google_oauth_state"


@dataclass(frozen=True)
class GoogleOAuthConfig:
    client_id: str
    client_secret: str
    redirect_uri: str
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class GoogleProfile:
    subject: str
    email: str | None
    email_verified: bool


def default_config() -> GoogleOAuthConfig:
    return GoogleOAuthConfig(
        client_id=GOOGLE_CLIENT_ID or "",
        client_secret=GOOGLE_CLIENT_SECRET or "",
        redirect_uri=GOOGLE_CALLBACK_URL,
        timeout_seconds=GOOGLE_HTTP_TIMEOUT_SECONDS,
    )


# ======================
# State
# ======================

def create_oauth_state() -> tuple[str, str]:
    """Return (state, nonce). The nonce goes into a cookie."""
    nonce = secrets.token_urlsafe(24)
    state = sign_claims({"nonce": nonce}, purpose=STATE_PURPOSE)
    return state, nonce


def verify_oauth_state(state: str | None, nonce: str | None) -> None:
    if not state or not nonce:
        raise ProviderError("missing oauth state")
    try:
        payload = read_claims(state, purpose=STATE_PURPOSE)
    except JWTError as e:
        raise ProviderError("invalid oauth state") from e

    if not secrets.compare_digest(str(payload.get("nonce", "")), nonce):
        raise ProviderError("oauth state mismatch")


# ======================
# Client
# ======================

class GoogleOAuthClient:
    def __init__(self, config: GoogleOAuthConfig):
        self.cfg = config

    def build_authorization_url(self, *, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.cfg.client_id,
            "redirect_uri": self.cfg.redirect_uri,
            "scope": " ".join(GOOGLE_SCOPES),
            "state": state,
        }
        return f"{GOOGLE_AUTHORIZATION_URL}?{urlencode(params)}"

    async def exchange_code(self, client: httpx.AsyncClient, code: str) -> dict:
        resp = await client.post(
            GOOGLE_TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "client_id": self.cfg.client_id,
                "client_secret": self.cfg.client_secret,
                "redirect_uri": self.cfg.redirect_uri,
            },
            headers={"Accept": "application/json"},
        )
        if resp.status_code != 200:
            logger.warning("GOOGLE_TOKEN_EXCHANGE_FAILED status=%s", resp.status_code)
            raise ProviderError("token_exchange_failed")

        tokens = resp.json()
        if not tokens.get("access_token"):
            raise ProviderError("token_exchange_failed")
        return tokens

    async def fetch_profile(self, client: httpx.AsyncClient, access_token: str) -> GoogleProfile:
        resp = await client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if resp.status_code != 200:
            logger.warning("GOOGLE_USERINFO_FAILED status=%s", resp.status_code)
            raise ProviderError("userinfo_failed")

        data = resp.json()
        subject = data.get("sub")
        if not subject:
            raise ProviderError("userinfo_missing_subject")

        return GoogleProfile(
            subject=str(subject),
            email=data.get("email"),
            email_verified=data.get("email_verified", True) is not False,
        )

    async def complete_authorization(self, db, code: str) -> dict:
        """
        Exchange the callback code and map the Google profile onto an identity.
        Raises ProviderError on any exchange failure and ProfileIncomplete when
        Google did not hand back a usable email.
        """
        if not code:
            raise ProviderError("missing_code")

        try:
            async with httpx.AsyncClient(timeout=self.cfg.timeout_seconds) as client:
                tokens = await self.exchange_code(client, code)
                profile = await self.fetch_profile(client, tokens["access_token"])
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("GOOGLE_HTTP_ERROR error=%s", type(e).__name__)
            raise ProviderError("provider_unreachable") from e

        email = (profile.email or "").strip()
        if not email or not profile.email_verified:
            raise ProfileIncomplete("google profile has no usable email")

        return await find_or_create_federated_user(
            db,
            email=email,
            federated_id=profile.subject,
        )
