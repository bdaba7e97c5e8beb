"""
User document model.

Maps to the `users` MongoDB collection.

Pending one-time codes live on the user document itself, one optional
sub-document per purpose, so the code and its expiry are always written and
removed together.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from schemas.models.base import MongoBaseModel

OtpField = Literal["verify_otp", "reset_otp"]

OTP_FIELD_VERIFY: OtpField = "verify_otp"
OTP_FIELD_RESET: OtpField = "reset_otp"


class OtpState(BaseModel):
    """A pending one-time code: SHA-256 of the code plus absolute expiry."""

    code_hash: str
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # pymongo returns naive datetimes that are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    email: str
    name: Optional[str] = None
    password_hash: str
    verified: bool = False
    verify_otp: Optional[OtpState] = None
    reset_otp: Optional[OtpState] = None
    signup_ip: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def pending_otp(self, field: OtpField) -> Optional[OtpState]:
        return getattr(self, field)
