"""
The two ways an identity can be established.

Routes talk to AuthenticationMethod only; each variant ends in an identity
record, and the session layer only ever sees that record's id.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from utils.credentials import verify_local_user
from utils.google_oauth import (
    GoogleOAuthClient,
    create_oauth_state,
    default_config,
    verify_oauth_state,
)


@dataclass
class Initiation:
    redirect_url: str
    nonce: Optional[str] = None


class AuthenticationMethod(ABC):

    @abstractmethod
    async def complete(self, db, **params) -> dict:
        """Finish the method and return the identity it established."""


class LocalAuthentication(AuthenticationMethod):

    async def complete(self, db, *, username: str, password: str) -> dict:
        return await verify_local_user(db, username, password)


class GoogleAuthentication(AuthenticationMethod):
    """Redirect-based: initiate() sends the browser to Google first."""

    def __init__(self, client: GoogleOAuthClient):
        self.client = client

    def initiate(self) -> Initiation:
        state, nonce = create_oauth_state()
        return Initiation(
            redirect_url=self.client.build_authorization_url(state=state),
            nonce=nonce,
        )

    async def complete(self, db, *, code: str, state: str | None, nonce: str | None) -> dict:
        verify_oauth_state(state, nonce)
        return await self.client.complete_authorization(db, code)


_local = LocalAuthentication()
_google = None


def get_local_auth() -> AuthenticationMethod:
    return _local


def get_google_auth() -> GoogleAuthentication:
    global _google
    if _google is None:
        _google = GoogleAuthentication(GoogleOAuthClient(default_config()))
    return _google
