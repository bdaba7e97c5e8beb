"""
OtpService — one-time passcode lifecycle on the user record.

Codes are generated from ``secrets``, stored as SHA-256 hashes with an
absolute expiry, compared in constant time and consumed exactly once. The
consuming update also carries the effect the code unlocks (marking the
account verified, storing a new password hash), so the code is never cleared
without the effect being applied or the other way round.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from config import OtpSettings
from errors import NoPendingCodeError, OtpExpiredError, OtpMismatchError
from repositories.user_repository import UserRepository
from schemas.models.user import OtpField, OtpState, UserDoc
from shared.crypto import constant_time_equals, hash_token
from shared.generators import generate_otp_code
from shared.logging import get_logger

log = get_logger(__name__)

Effect = Union[Mapping[str, Any], Callable[[], Awaitable[Mapping[str, Any]]]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_millis(value: datetime) -> datetime:
    # MongoDB stores datetimes with millisecond precision; keep the value we
    # compare against later identical to the stored one
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


class OtpService:
    def __init__(
        self,
        users: UserRepository,
        settings: OtpSettings,
        clock: Optional[Callable[[], datetime]] = None,
        code_factory: Optional[Callable[[int], str]] = None,
    ) -> None:
        self._users = users
        self._settings = settings
        self._clock = clock or _utcnow
        self._code_factory = code_factory or generate_otp_code

    def generate(self) -> str:
        """Return a fresh numeric code. Nothing is persisted."""
        return self._code_factory(self._settings.otp_length)

    async def attach(
        self,
        user_id: str,
        code: str,
        ttl: int,
        field: OtpField,
        *,
        require_unverified: bool = False,
    ) -> Optional[UserDoc]:
        """Store *code* in *field*, expiring *ttl* seconds from now.

        Any previous pending code for *field* is overwritten, so only the
        latest one can verify. Returns the updated user, or None if the
        user does not exist (or is verified, with *require_unverified*).
        """
        state = OtpState(
            code_hash=hash_token(code),
            expires_at=_to_millis(self._clock() + timedelta(seconds=ttl)),
        )
        user = await self._users.set_otp(
            user_id, field, state, require_unverified=require_unverified
        )
        if user is not None:
            log.info(
                "otp_attached",
                user_id=str(user.id),
                field=field,
                expires_at=state.expires_at.isoformat(),
            )
        return user

    async def verify(
        self,
        user: UserDoc,
        field: OtpField,
        supplied_code: str,
        effect: Effect,
    ) -> None:
        """Check *supplied_code* against the pending code and consume it.

        On success *field* is cleared and *effect* (a ``$set`` mapping) is
        applied in the same atomic update. *effect* may also be a coroutine
        function returning the mapping; it is awaited only once the code
        has matched.

        Raises:
            NoPendingCodeError: nothing pending, or it was consumed/replaced
                by a concurrent request.
            OtpExpiredError: the pending code is past its expiry.
            OtpMismatchError: the code does not match.
        """
        pending = user.pending_otp(field)
        if pending is None:
            log.warning(
                "otp_verification_failed",
                user_id=str(user.id),
                field=field,
                reason="no_pending_code",
            )
            raise NoPendingCodeError("no pending verification code, request a new one")

        if self._clock() > pending.expires_at:
            log.warning(
                "otp_verification_failed",
                user_id=str(user.id),
                field=field,
                reason="expired",
            )
            raise OtpExpiredError("verification code has expired")

        if not constant_time_equals(hash_token(supplied_code), pending.code_hash):
            log.warning(
                "otp_verification_failed",
                user_id=str(user.id),
                field=field,
                reason="mismatch",
            )
            raise OtpMismatchError("invalid verification code")

        if callable(effect):
            effect = await effect()

        consumed = await self._users.consume_otp(user.id, field, pending, effect)
        if not consumed:
            raise NoPendingCodeError("no pending verification code, request a new one")

        log.info("otp_verified", user_id=str(user.id), field=field)
