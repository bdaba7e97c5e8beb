"""
FastAPI dependency providers.

Long-lived collaborators (settings, repository, token service, email
provider) are created once in the app lifespan and stored on ``app.state``;
the providers below hand them to route handlers via Depends().
"""

from __future__ import annotations

from fastapi import Depends, Request

from config import AppSettings
from infrastructure.email.protocol import EmailProvider
from repositories.user_repository import UserRepository
from services.auth_service import AuthService
from services.otp_service import OtpService
from services.token_service import TokenService


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.users


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_email_provider(request: Request) -> EmailProvider:
    return request.app.state.email_provider


def get_otp_service(
    users: UserRepository = Depends(get_user_repository),
    settings: AppSettings = Depends(get_settings),
) -> OtpService:
    return OtpService(users, settings.otp)


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
    otps: OtpService = Depends(get_otp_service),
    email_provider: EmailProvider = Depends(get_email_provider),
    settings: AppSettings = Depends(get_settings),
) -> AuthService:
    return AuthService(users, tokens, otps, email_provider, settings.otp)
