"""
Authentication

Sessions are issued by an external auth provider. This module only asks
the provider who a bearer token belongs to.
"""
from abc import ABC, abstractmethod
from typing import Optional
import logging

import httpx
from fastapi import Depends, Header

from .config import settings
from .errors import Unauthorized

logger = logging.getLogger(__name__)


class SessionVerifier(ABC):
    """Resolves a bearer token to the owning user's id."""

    @abstractmethod
    async def verify(self, token: str) -> Optional[str]:
        """Return the user id, or None when the token is not a valid session."""
        pass


class HttpSessionVerifier(SessionVerifier):
    """Asks a Supabase-style auth endpoint: GET {auth_url}/user."""

    def __init__(
        self,
        auth_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.auth_url = auth_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def verify(self, token: str) -> Optional[str]:
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.auth_url}/user", headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Auth provider unreachable: {e}")
            return None

        if response.status_code != 200:
            logger.debug(f"Session rejected by auth provider ({response.status_code})")
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Auth provider returned a non-JSON user payload")
            return None
        if not isinstance(payload, dict):
            logger.warning("Auth provider returned a user payload that is not an object")
            return None

        user_id = payload.get("id")
        return str(user_id) if user_id else None


_verifier: Optional[SessionVerifier] = None


def get_session_verifier() -> SessionVerifier:
    """Get or create the session verifier (FastAPI dependency)."""
    global _verifier
    if _verifier is None:
        _verifier = HttpSessionVerifier(
            settings.auth_url,
            settings.auth_api_key,
            settings.auth_timeout_seconds,
        )
    return _verifier


async def get_current_user(
    authorization: Optional[str] = Header(None),
    verifier: SessionVerifier = Depends(get_session_verifier),
) -> str:
    """Owner id of the caller. Missing or invalid sessions are 401."""
    if not authorization:
        raise Unauthorized("Unauthorized")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Unauthorized")

    user_id = await verifier.verify(token.strip())
    if not user_id:
        raise Unauthorized("Unauthorized")
    return user_id
