"""
Shared test fixtures.

InMemoryUserRepository mirrors UserRepository's contract (atomic single
document updates, CAS on consume, DuplicateKeyError on a taken email) so the
services can be exercised without a MongoDB server. RecordingEmailProvider
captures outgoing codes instead of sending them.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from config import (
    AppSettings,
    CookieSettings,
    DatabaseSettings,
    EmailSettings,
    JWTSettings,
    LoggingSettings,
    OtpSettings,
    SentrySettings,
)
from schemas.models.user import OtpState, UserDoc
from services.auth_service import AuthService
from services.otp_service import OtpService
from services.token_service import TokenService

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256"


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.docs: dict[ObjectId, UserDoc] = {}

    async def ensure_indexes(self) -> None:
        return None

    async def find_by_id(self, user_id) -> Optional[UserDoc]:
        # Yield so concurrent requests interleave between read and write
        await asyncio.sleep(0)
        oid = ObjectId(str(user_id)) if ObjectId.is_valid(str(user_id)) else None
        doc = self.docs.get(oid)
        return doc.model_copy(deep=True) if doc else None

    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        await asyncio.sleep(0)
        for doc in self.docs.values():
            if doc.email == email:
                return doc.model_copy(deep=True)
        return None

    async def create(self, user: UserDoc) -> ObjectId:
        if any(doc.email == user.email for doc in self.docs.values()):
            raise DuplicateKeyError("E11000 duplicate key error: email")
        oid = ObjectId()
        self.docs[oid] = user.model_copy(update={"id": oid}, deep=True)
        return oid

    async def set_otp(self, user_id, field, otp: OtpState, *, require_unverified=False):
        doc = self.docs.get(ObjectId(str(user_id)))
        if doc is None or (require_unverified and doc.verified):
            return None
        setattr(doc, field, otp.model_copy())
        doc.updated_at = datetime.now(timezone.utc)
        return doc.model_copy(deep=True)

    async def consume_otp(
        self, user_id, field, expected: OtpState, effect: Mapping[str, Any]
    ) -> bool:
        doc = self.docs.get(ObjectId(str(user_id)))
        if doc is None:
            return False
        current = getattr(doc, field)
        if (
            current is None
            or current.code_hash != expected.code_hash
            or current.expires_at != expected.expires_at
        ):
            return False
        setattr(doc, field, None)
        for key, value in effect.items():
            setattr(doc, key, value)
        doc.updated_at = datetime.now(timezone.utc)
        return True


class RecordingEmailProvider:
    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.welcome: list[str] = []
        self.verification_codes: list[tuple[str, str]] = []
        self.reset_codes: list[tuple[str, str]] = []

    async def send_welcome_email(self, email, name) -> bool:
        self.welcome.append(email)
        return self.succeed

    async def send_verification_email(self, email, name, otp_code, expires_in_minutes):
        self.verification_codes.append((email, otp_code))
        return self.succeed

    async def send_password_reset_email(self, email, name, otp_code, expires_in_minutes):
        self.reset_codes.append((email, otp_code))
        return self.succeed


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now = self.now + timedelta(**delta)


def make_settings(**overrides) -> AppSettings:
    values: dict[str, Any] = dict(
        env="development",
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        jwt=JWTSettings(jwt_secret=TEST_SECRET),
        cookie=CookieSettings(),
        otp=OtpSettings(),
        email=EmailSettings(),
        logging=LoggingSettings(),
        sentry=SentrySettings(),
    )
    values.update(overrides)
    return AppSettings(**values)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def settings() -> AppSettings:
    return make_settings()


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def email_provider() -> RecordingEmailProvider:
    return RecordingEmailProvider()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService(settings.jwt)


@pytest.fixture
def otp_service(users, settings, clock) -> OtpService:
    return OtpService(users, settings.otp, clock=clock)


@pytest.fixture
def auth_service(users, token_service, otp_service, email_provider, settings):
    return AuthService(users, token_service, otp_service, email_provider, settings.otp)
