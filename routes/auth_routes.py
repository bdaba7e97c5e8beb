"""
Authentication endpoints.

POST /auth/register         — create account, set credential cookie
POST /auth/login            — check password, set credential cookie
POST /auth/logout           — clear credential cookie
POST /auth/send-verify-otp  — mail an account verification code   (cookie)
POST /auth/verify-account   — consume the verification code        (cookie)
POST /auth/is-auth          — session check                        (cookie)
POST /auth/send-reset-otp   — mail a password reset code
POST /auth/reset-password   — consume the reset code, set new password

Every response body is ``{success, message}``; failures are raised as
AppError and rendered by the global handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from config import AppSettings
from dependencies import get_auth_service, get_settings, get_token_service
from middleware.auth import AuthContext, require_auth
from schemas.dto.requests.auth import (
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SendResetOtpRequest,
    VerifyAccountRequest,
)
from schemas.dto.responses.common import MessageResponse
from services.auth_service import AuthService
from services.token_service import TokenService
from shared.cookies import clear_auth_cookie, set_auth_cookie
from shared.ip_utils import get_client_ip
from shared.logging import get_logger

router = APIRouter(prefix="/auth", tags=["auth"])
log = get_logger(__name__)


@router.post("/register", response_model=MessageResponse)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    tokens: TokenService = Depends(get_token_service),
    settings: AppSettings = Depends(get_settings),
) -> MessageResponse:
    token = await auth.register(
        body.email, body.password, body.name, signup_ip=get_client_ip(request)
    )
    set_auth_cookie(response, token, settings.cookie, tokens.ttl_seconds)
    return MessageResponse(success=True, message="account created")


@router.post("/login", response_model=MessageResponse)
async def login(
    body: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    tokens: TokenService = Depends(get_token_service),
    settings: AppSettings = Depends(get_settings),
) -> MessageResponse:
    token = await auth.login(body.email, body.password)
    set_auth_cookie(response, token, settings.cookie, tokens.ttl_seconds)
    return MessageResponse(success=True, message="logged in")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response, settings: AppSettings = Depends(get_settings)
) -> MessageResponse:
    clear_auth_cookie(response, settings.cookie)
    log.info("logout")
    return MessageResponse(success=True, message="logged out")


@router.post("/send-verify-otp", response_model=MessageResponse)
async def send_verify_otp(
    ctx: AuthContext = Depends(require_auth),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.send_verify_otp(ctx.user_id)
    return MessageResponse(
        success=True, message="verification code sent to your email"
    )


@router.post("/verify-account", response_model=MessageResponse)
async def verify_account(
    body: VerifyAccountRequest,
    ctx: AuthContext = Depends(require_auth),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.verify_email(ctx.user_id, body.otp)
    return MessageResponse(success=True, message="email verified successfully")


@router.post("/is-auth", response_model=MessageResponse)
async def is_auth(
    ctx: AuthContext = Depends(require_auth),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return MessageResponse(
        success=auth.is_authenticated(ctx.user_id), message="authenticated"
    )


@router.post("/send-reset-otp", response_model=MessageResponse)
async def send_reset_otp(
    body: SendResetOtpRequest,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.send_reset_otp(body.email)
    return MessageResponse(
        success=True, message="password reset code sent to your email"
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.reset_password(body.email, body.otp, body.new_password)
    return MessageResponse(
        success=True, message="password has been reset successfully"
    )
