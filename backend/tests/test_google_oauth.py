"""Unit tests for the Google OAuth client."""

from unittest.mock import AsyncMock, MagicMock, Mock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from utils.errors import ProfileIncomplete, ProviderError
from utils.google_oauth import (
    GoogleOAuthClient,
    GoogleOAuthConfig,
    GoogleProfile,
    create_oauth_state,
    verify_oauth_state,
)
from utils.jwt import sign_claims


def _make_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(GoogleOAuthConfig(
        client_id="cid",
        client_secret="csecret",
        redirect_uri="http://localhost:3000/auth/google/complete-registration",
    ))


def _response(status_code: int, payload: dict | None = None):
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = payload or {}
    return resp


@pytest.mark.unit
class TestAuthorizationUrl:

    def test_requests_profile_and_email_scopes(self):
        url = _make_client().build_authorization_url(state="abc")

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert parsed.netloc == "accounts.google.com"
        assert params["scope"] == ["profile email"]
        assert params["response_type"] == ["code"]
        assert params["client_id"] == ["cid"]
        assert params["state"] == ["abc"]
        assert params["redirect_uri"] == ["http://localhost:3000/auth/google/complete-registration"]


@pytest.mark.unit
class TestOAuthState:

    def test_state_round_trip(self):
        state, nonce = create_oauth_state()
        verify_oauth_state(state, nonce)

    def test_nonce_mismatch_rejected(self):
        state, _ = create_oauth_state()
        with pytest.raises(ProviderError):
            verify_oauth_state(state, "other-nonce")

    @pytest.mark.parametrize("state,nonce", [(None, "n"), ("s", None), ("garbage", "n")])
    def test_missing_or_malformed_state_rejected(self, state, nonce):
        with pytest.raises(ProviderError):
            verify_oauth_state(state, nonce)

    def test_token_for_other_purpose_rejected(self):
        token = sign_claims({"nonce": "n"}, purpose="something_else")
        with pytest.raises(ProviderError):
            verify_oauth_state(token, "n")


@pytest.mark.unit
class TestExchange:

    @pytest.mark.asyncio
    async def test_exchange_posts_code(self):
        http = MagicMock()
        http.post = AsyncMock(return_value=_response(200, {"access_token": "at"}))

        tokens = await _make_client().exchange_code(http, "the-code")

        assert tokens["access_token"] == "at"
        sent = http.post.await_args.kwargs["data"]
        assert sent["code"] == "the-code"
        assert sent["grant_type"] == "authorization_code"
        assert sent["client_secret"] == "csecret"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resp", [_response(400), _response(200, {})])
    async def test_failed_exchange_is_provider_error(self, resp):
        http = MagicMock()
        http.post = AsyncMock(return_value=resp)
        with pytest.raises(ProviderError):
            await _make_client().exchange_code(http, "bad-code")

    @pytest.mark.asyncio
    async def test_profile_maps_claims(self):
        http = MagicMock()
        http.get = AsyncMock(return_value=_response(200, {
            "sub": "g123",
            "email": "a@x.com",
            "email_verified": True,
            "given_name": "Ann",
        }))

        profile = await _make_client().fetch_profile(http, "at")

        assert profile == GoogleProfile(
            subject="g123", email="a@x.com", email_verified=True
        )
        assert http.get.await_args.kwargs["headers"]["Authorization"] == "Bearer at"

    @pytest.mark.asyncio
    async def test_profile_without_subject_is_provider_error(self):
        http = MagicMock()
        http.get = AsyncMock(return_value=_response(200, {"email": "a@x.com"}))
        with pytest.raises(ProviderError):
            await _make_client().fetch_profile(http, "at")


@pytest.mark.unit
class TestCompleteAuthorization:

    @pytest.mark.asyncio
    async def test_creates_identity_from_profile(self, db):
        client = _make_client()
        with patch.object(client, "exchange_code", AsyncMock(return_value={"access_token": "at"})), \
             patch.object(client, "fetch_profile", AsyncMock(return_value=GoogleProfile("g123", "a@x.com", True))):
            user = await client.complete_authorization(db, "code")

        assert user["federated_id"] == "g123"
        assert user["email"] == "a@x.com"
        assert await db.users.count_documents({}) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("profile", [
        GoogleProfile("g123", None, True),
        GoogleProfile("g123", "  ", True),
        GoogleProfile("g123", "a@x.com", False),
    ])
    async def test_unusable_email_is_profile_incomplete(self, db, profile):
        client = _make_client()
        with patch.object(client, "exchange_code", AsyncMock(return_value={"access_token": "at"})), \
             patch.object(client, "fetch_profile", AsyncMock(return_value=profile)):
            with pytest.raises(ProfileIncomplete):
                await client.complete_authorization(db, "code")

        assert await db.users.count_documents({}) == 0

    @pytest.mark.asyncio
    async def test_network_failure_is_provider_error(self, db):
        client = _make_client()
        with patch.object(client, "exchange_code", AsyncMock(side_effect=httpx.ConnectTimeout("slow"))):
            with pytest.raises(ProviderError):
                await client.complete_authorization(db, "code")

    @pytest.mark.asyncio
    async def test_missing_code_is_provider_error(self, db):
        with pytest.raises(ProviderError):
            await _make_client().complete_authorization(db, None)
