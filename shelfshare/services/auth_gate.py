"""Auth Gate — turns inbound request headers into a verified Identity.

Invariants:
    - No credential, or a credential that is not `Bearer <token>` -> AuthenticationError
    - Token rejected by TokenService -> AuthenticationError
    - The gate only raises; it never writes a response. The FastAPI dependency
      propagates the error so no route body (and no ledger/review call) runs
    - The token itself is never logged

Design Decisions:
    - Takes a header mapping, not a framework Request: Starlette Headers is already a
      case-insensitive Mapping, and tests can pass a plain dict
"""

import logging
import re
from typing import Mapping

from shelfshare.core.domain_types import Identity
from shelfshare.core.errors import AuthenticationError
from shelfshare.core.token_service import TokenService

logger = logging.getLogger(__name__)

_BEARER = re.compile(r"^Bearer\s+(\S+)\s*$", re.IGNORECASE)


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` value."""
    if not authorization:
        return None
    match = _BEARER.match(authorization.strip())
    return match.group(1) if match else None


class AuthGate:
    """Bridges request metadata to a verified identity."""

    def __init__(self, token_service: TokenService):
        self._tokens = token_service

    def authenticate(self, headers: Mapping[str, str]) -> Identity:
        authorization = headers.get("authorization") or headers.get("Authorization")
        token = extract_bearer_token(authorization)
        if token is None:
            raise AuthenticationError("Missing or invalid authorization header")

        identity = self._tokens.verify(token)
        if identity is None:
            logger.warning("Rejected invalid or expired token")
            raise AuthenticationError("Invalid or expired token")
        return identity
