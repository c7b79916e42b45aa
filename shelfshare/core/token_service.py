"""Token Service — issues and verifies signed, time-bounded identity tokens.

Invariants:
    - Wire format is `header.claims.signature`, each segment URL-safe base64 without padding
    - Signature is HMAC-SHA256 over `header.claims` with the server secret
    - A token is accepted only if the signature matches AND now < exp
    - Signatures compared in constant time (hmac.compare_digest)
    - The secret is set once in __init__ and never reassigned

Design Decisions:
    - Stateless tokens over a session table: verification needs no IO, scales per request
    - HS256 only: issuer and verifier are the same trusted server
    - verify() returns None instead of raising: the caller (AuthGate) decides the error shape,
      same as the pure check_* functions elsewhere in core
    - clock injected: expiry is data-driven, tests move time without sleeping
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Callable

from shelfshare.core.domain_types import Identity, UserId
from shelfshare.core.errors import ConfigurationError


ALGORITHM: str = "HS256"
DEFAULT_TTL_SECONDS: int = 86_400  # 24h
MIN_SECRET_BYTES: int = 32

_HEADER: dict = {"alg": ALGORITHM, "typ": "JWT"}
_REQUIRED_CLAIMS: tuple[str, ...] = ("id", "email", "username", "iat", "exp")


def b64url_encode(data: bytes) -> str:
    """URL-safe base64 without '=' padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    """Inverse of b64url_encode. Raises ValueError on malformed input."""
    padded = segment + "=" * (-len(segment) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError("invalid base64url segment") from e


def _encode_json(obj: dict) -> str:
    return b64url_encode(
        json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8"),
    )


def _decode_json(segment: str) -> dict | None:
    try:
        value = json.loads(b64url_decode(segment))
    except (ValueError, UnicodeDecodeError):
        return None
    return value if isinstance(value, dict) else None


class TokenService:
    """Signs and verifies identity tokens with a shared HMAC secret."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        key = secret.encode("utf-8")
        if len(key) < MIN_SECRET_BYTES:
            raise ConfigurationError(
                f"Signing secret must be at least {MIN_SECRET_BYTES} bytes",
            )
        self._key = key
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    def _sign(self, signing_input: str) -> str:
        digest = hmac.new(
            self._key, signing_input.encode("utf-8"), hashlib.sha256,
        ).digest()
        return b64url_encode(digest)

    def issue(
        self,
        user_id: int,
        email: str,
        username: str,
        ttl_seconds: int | None = None,
    ) -> str:
        """Create a signed token for the given identity fields."""
        now = int(self._clock())
        ttl = self._ttl_seconds if ttl_seconds is None else ttl_seconds
        claims = {
            "id": user_id,
            "email": email,
            "username": username,
            "iat": now,
            "exp": now + ttl,
        }
        signing_input = f"{_encode_json(_HEADER)}.{_encode_json(claims)}"
        return f"{signing_input}.{self._sign(signing_input)}"

    def verify(self, token: str) -> Identity | None:
        """Return the Identity carried by a valid, unexpired token, else None."""
        parts = token.split(".")
        if len(parts) != 3:
            return None
        header_segment, claims_segment, signature_segment = parts

        expected = self._sign(f"{header_segment}.{claims_segment}")
        if not hmac.compare_digest(
            expected.encode("ascii"), signature_segment.encode("utf-8"),
        ):
            return None

        header = _decode_json(header_segment)
        if header is None or header.get("alg") != ALGORITHM:
            return None

        claims = _decode_json(claims_segment)
        if claims is None or any(k not in claims for k in _REQUIRED_CLAIMS):
            return None
        if not isinstance(claims["id"], int) or not isinstance(claims["exp"], int):
            return None

        if int(self._clock()) >= claims["exp"]:
            return None

        return Identity(
            user_id=UserId(claims["id"]),
            email=str(claims["email"]),
            username=str(claims["username"]),
            issued_at=int(claims["iat"]),
            expires_at=claims["exp"],
        )
