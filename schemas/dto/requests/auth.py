"""
Request DTOs for authentication endpoints.

RegisterRequest        — POST /auth/register
LoginRequest           — POST /auth/login
VerifyAccountRequest   — POST /auth/verify-account
SendResetOtpRequest    — POST /auth/send-reset-otp
ResetPasswordRequest   — POST /auth/reset-password

Fields are optional at the schema level; presence and format are checked by
AuthService so missing fields surface as InvalidInput with a specific message.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None


class VerifyAccountRequest(BaseModel):
    """Request body for POST /auth/verify-account.

    ``otp`` is the numeric code mailed by /auth/send-verify-otp.
    A JSON number is taken as its decimal string, so a code with leading
    zeros must be sent as a string.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    otp: Optional[str] = None


class SendResetOtpRequest(BaseModel):
    """Request body for POST /auth/send-reset-otp."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset-password.

    Accepts ``newPassword`` (web clients) as well as ``new_password``.
    Numbers are coerced to strings as in VerifyAccountRequest.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    email: Optional[str] = None
    otp: Optional[str] = None
    new_password: Optional[str] = Field(default=None, alias="newPassword")
