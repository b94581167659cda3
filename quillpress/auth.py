"""
Auth — Interface to the identity collaborator.

The editor only needs to know whether someone is signed in and, at save
time, a bearer token for the storage and article endpoints. Session and
token issuance live elsewhere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol

from .errors import AuthRequired

if TYPE_CHECKING:
    from .config.loader import EditorConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    """The signed-in author."""

    uid: str
    display_name: Optional[str] = None


class AuthProvider(Protocol):
    """What the editor needs from the identity collaborator."""

    def current_user(self) -> Optional[User]:
        ...

    async def get_token(self) -> str:
        ...


class StaticTokenAuth:
    """
    Identity backed by a pre-issued bearer token.

    Used when the token comes from configuration rather than an
    interactive sign-in. ``sign_out()`` clears it.
    """

    def __init__(self, token: Optional[str], user: Optional[User] = None):
        self._token = token
        self._user = user if token else None

    @classmethod
    def from_config(cls, config: "EditorConfig", user: Optional[User] = None) -> "StaticTokenAuth":
        """Use QUILLPRESS_AUTH_TOKEN as the bearer token."""
        return cls(config.auth_token, user)

    def current_user(self) -> Optional[User]:
        return self._user

    async def get_token(self) -> str:
        if not self._token:
            raise AuthRequired("Authentication token not found")
        return self._token

    def sign_out(self) -> None:
        logger.info("Signed out")
        self._token = None
        self._user = None


def require_user(auth: AuthProvider) -> User:
    """Return the signed-in user or raise ``AuthRequired``."""
    user = auth.current_user()
    if user is None:
        raise AuthRequired()
    return user
