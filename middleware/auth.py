"""
Authentication gate for protected routes.

``require_auth`` reads the credential cookie, verifies the token and hands
the route an explicit ``AuthContext``. It never reads or writes user
records and writes no response on success.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from fastapi import Depends, Request

from config import AppSettings
from dependencies import get_settings, get_token_service
from errors import AuthenticationError, MissingTokenError
from services.token_service import NOT_AUTHORIZED_MESSAGE, TokenService
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity resolved for the current request."""

    user_id: str


async def require_auth(
    request: Request,
    settings: AppSettings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
) -> AuthContext:
    token = request.cookies.get(settings.cookie.cookie_name)
    if not token:
        raise MissingTokenError(NOT_AUTHORIZED_MESSAGE)

    try:
        user_id = tokens.verify(token)
    except AuthenticationError as e:
        log.warning("auth_rejected", error_code=e.error_code, path=request.url.path)
        raise

    ctx = AuthContext(user_id=user_id)
    request.state.auth = ctx
    structlog.contextvars.bind_contextvars(user_id=user_id)
    return ctx
