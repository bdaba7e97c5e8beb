"""
TokenService — issues and verifies signed, time-bounded identity tokens.

Tokens are JWTs carrying the user id in ``sub``. Signing uses RS256 when a
key pair is configured and HS256 with ``JWT_SECRET`` otherwise. The signing
material is captured at construction and never changes afterwards.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from config import JWTSettings
from errors import ExpiredTokenError, InvalidTokenError, MissingClaimError
from shared.logging import get_logger

log = get_logger(__name__)

NOT_AUTHORIZED_MESSAGE = "not authorized, login again"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    def __init__(
        self,
        settings: JWTSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if settings.use_rs256:
            # Keys provided via env may carry literal \n sequences
            self._signing_key = settings.jwt_private_key.replace("\\n", "\n")
            self._verify_key = settings.jwt_public_key.replace("\\n", "\n")
            self._algorithm = "RS256"
        elif settings.jwt_secret:
            self._signing_key = self._verify_key = settings.jwt_secret
            self._algorithm = "HS256"
        else:
            raise RuntimeError(
                "JWT_SECRET must be set when RS256 keys are not provided"
            )
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience
        self._ttl = settings.token_ttl_seconds
        self._clock = clock or _utcnow

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def issue(self, user_id: str) -> str:
        now = self._clock()
        claims = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self._ttl)).timestamp()),
        }
        return jwt.encode(claims, self._signing_key, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Return the user id bound to *token*.

        Raises:
            ExpiredTokenError: signature valid but ``exp`` has passed.
            MissingClaimError: signature valid but no ``sub`` claim.
            InvalidTokenError: anything else (malformed, bad signature,
                wrong issuer or audience).
        """
        try:
            claims = jwt.decode(
                token,
                self._verify_key,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError(NOT_AUTHORIZED_MESSAGE) from e
        except jwt.InvalidTokenError as e:
            log.warning("token_invalid", reason=type(e).__name__)
            raise InvalidTokenError(NOT_AUTHORIZED_MESSAGE) from e

        subject = claims.get("sub")
        if not subject:
            raise MissingClaimError(NOT_AUTHORIZED_MESSAGE)
        return str(subject)
