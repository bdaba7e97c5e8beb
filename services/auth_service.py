"""
AuthService — the user-facing authentication operations.

Orchestrates the credential store, TokenService, OtpService and the email
provider. Every failure is raised as a typed AppError; the transport layer
turns them into the uniform response body. Setting and clearing the
credential cookie is left to the routes.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

from pymongo.errors import DuplicateKeyError

from config import OtpSettings
from errors import (
    AlreadyVerifiedError,
    BadCredentialError,
    EmailDeliveryError,
    EmailTakenError,
    UserNotFoundError,
    ValidationError,
)
from infrastructure.email.protocol import EmailProvider
from repositories.user_repository import UserRepository
from schemas.models.user import OTP_FIELD_RESET, OTP_FIELD_VERIFY, UserDoc
from services.otp_service import OtpService
from services.token_service import TokenService
from shared.crypto import hash_password, verify_password
from shared.logging import get_logger, log_with_context
from shared.validators import normalize_email, validate_email, validate_password

log = get_logger(__name__)


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        otps: OtpService,
        email_provider: EmailProvider,
        otp_settings: OtpSettings,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._otps = otps
        self._email = email_provider
        self._otp_settings = otp_settings

    # ── Credentials ──────────────────────────────────────────────────────────

    async def register(
        self,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str] = None,
        signup_ip: Optional[str] = None,
    ) -> str:
        """Create an unverified account and return a token for it."""
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("email and password are required")
        if not validate_email(email):
            raise ValidationError("invalid email address", field="email")
        if not validate_password(password):
            raise ValidationError(
                "password must be at most 128 characters", field="password"
            )

        if await self._users.find_by_email(email) is not None:
            log.warning("registration_failed", reason="email_exists")
            raise EmailTakenError("user already exists")

        now = datetime.now(timezone.utc)
        user = UserDoc(
            email=email,
            name=(name or "").strip() or None,
            # argon2 is CPU-bound; keep it off the event loop
            password_hash=await asyncio.to_thread(hash_password, password),
            verified=False,
            signup_ip=signup_ip,
            created_at=now,
            updated_at=now,
        )
        try:
            user_id = await self._users.create(user)
        except DuplicateKeyError:
            # Email registered between our check and the insert
            log.warning("registration_failed", reason="race_condition_duplicate")
            raise EmailTakenError("user already exists")

        log.info("user_registered", user_id=str(user_id), has_name=bool(user.name))

        if not await self._email.send_welcome_email(email, user.name):
            # Registration stands even when the welcome mail is lost
            log.warning("welcome_email_failed", user_id=str(user_id))

        return self._tokens.issue(str(user_id))

    async def login(self, email: Optional[str], password: Optional[str]) -> str:
        """Check the password and return a fresh token."""
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("email and password are required")

        user = await self._users.find_by_email(email)
        if user is None:
            log.warning("login_failed", reason="unknown_email")
            raise UserNotFoundError("invalid email")

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            log.warning("login_failed", reason="invalid_password", user_id=str(user.id))
            raise BadCredentialError("invalid password")

        log.info("login_success", user_id=str(user.id))
        return self._tokens.issue(str(user.id))

    # ── Account verification ─────────────────────────────────────────────────

    async def send_verify_otp(self, user_id: str) -> None:
        """Issue a verification code for an unverified account and mail it."""
        ulog = log_with_context(log, user_id=user_id)
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError("user not found")
        if user.verified:
            raise AlreadyVerifiedError("account already verified")

        ttl = self._otp_settings.verify_otp_ttl_seconds
        code = self._otps.generate()
        updated = await self._otps.attach(
            user_id, code, ttl, OTP_FIELD_VERIFY, require_unverified=True
        )
        if updated is None:
            # Verified (or removed) since we read it
            raise AlreadyVerifiedError("account already verified")

        sent = await self._email.send_verification_email(
            updated.email, updated.name, code, ttl // 60
        )
        if not sent:
            ulog.error("verification_email_send_failed")
            raise EmailDeliveryError("failed to send verification email")
        ulog.info("verification_otp_sent")

    async def verify_email(self, user_id: str, code: Optional[str]) -> None:
        """Consume the pending verification code and mark the account verified."""
        code = (code or "").strip()
        if not code:
            raise ValidationError("verification code is required", field="otp")

        user = await self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError("user not found")

        await self._otps.verify(user, OTP_FIELD_VERIFY, code, {"verified": True})
        log.info("email_verified", user_id=user_id)

    # ── Password reset ───────────────────────────────────────────────────────

    async def send_reset_otp(self, email: Optional[str]) -> None:
        """Issue a password-reset code for the account behind *email* and mail it."""
        email = normalize_email(email)
        if not email:
            raise ValidationError("email is required", field="email")

        user = await self._users.find_by_email(email)
        if user is None:
            log.warning("password_reset_request_failed", reason="unknown_email")
            raise UserNotFoundError("user not found")

        ttl = self._otp_settings.reset_otp_ttl_seconds
        code = self._otps.generate()
        updated = await self._otps.attach(str(user.id), code, ttl, OTP_FIELD_RESET)
        if updated is None:
            raise UserNotFoundError("user not found")

        sent = await self._email.send_password_reset_email(
            updated.email, updated.name, code, ttl // 60
        )
        if not sent:
            log.error("password_reset_email_send_failed", user_id=str(user.id))
            raise EmailDeliveryError("failed to send password reset email")
        log.info("password_reset_otp_sent", user_id=str(user.id))

    async def reset_password(
        self,
        email: Optional[str],
        code: Optional[str],
        new_password: Optional[str],
    ) -> None:
        """Consume the pending reset code and replace the password hash."""
        email = normalize_email(email)
        code = (code or "").strip()
        if not email or not code or not new_password:
            raise ValidationError("email, otp and new password are required")
        if not validate_password(new_password):
            raise ValidationError(
                "password must be at most 128 characters", field="newPassword"
            )

        user = await self._users.find_by_email(email)
        if user is None:
            raise UserNotFoundError("user not found")

        async def new_password_hash() -> dict:
            # Hashed only after the code matches
            new_hash = await asyncio.to_thread(hash_password, new_password)
            return {"password_hash": new_hash}

        await self._otps.verify(user, OTP_FIELD_RESET, code, new_password_hash)
        log.info("password_reset", user_id=str(user.id))

    # ── Session ──────────────────────────────────────────────────────────────

    def is_authenticated(self, user_id: str) -> bool:
        # Reaching here means require_auth already admitted the caller
        return True

    async def get_user_data(self, user_id: str) -> UserDoc:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError("user not found")
        return user
