"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to the uniform ``{success, message}`` body
(plus a machine-readable ``code``).

Non-AppError exceptions are logged with full detail and reported to the
client as a generic internal error.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "internal server error"


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {
            "success": False,
            "message": self.message,
            "code": self.error_code,
        }
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "invalid_input"


# ── Authentication ────────────────────────────────────────────────────────────


class AuthenticationError(AppError):
    status_code = 401
    error_code = "unauthenticated"


class MissingTokenError(AuthenticationError):
    error_code = "missing_token"


class InvalidTokenError(AuthenticationError):
    error_code = "invalid_token"


class ExpiredTokenError(AuthenticationError):
    error_code = "expired_token"


class MissingClaimError(AuthenticationError):
    error_code = "missing_claim"


class BadCredentialError(AuthenticationError):
    error_code = "bad_credential"


# ── Accounts ──────────────────────────────────────────────────────────────────


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class UserNotFoundError(NotFoundError):
    error_code = "user_not_found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class EmailTakenError(ConflictError):
    error_code = "email_taken"


class AlreadyVerifiedError(ConflictError):
    error_code = "already_verified"


# ── One-time passcodes ────────────────────────────────────────────────────────


class OtpError(AppError):
    status_code = 400
    error_code = "otp_error"


class NoPendingCodeError(OtpError):
    error_code = "no_pending_code"


class OtpExpiredError(OtpError):
    error_code = "otp_expired"


class OtpMismatchError(OtpError):
    error_code = "otp_mismatch"


class EmailDeliveryError(AppError):
    status_code = 502
    error_code = "email_delivery_failed"


def register_error_handlers(app: FastAPI, uniform_status_codes: bool = False) -> None:
    """Register global exception handlers on the FastAPI app.

    With *uniform_status_codes* every error body is sent with HTTP 200, the
    way legacy clients of this API expect it.
    """

    def _status(code: int) -> int:
        return 200 if uniform_status_codes else code

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=_status(exc.status_code), content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        err = ValidationError("invalid request body")
        return JSONResponse(status_code=_status(err.status_code), content=err.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry (when initialised) captures the exception before this runs
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=_status(500),
            content={
                "success": False,
                "message": INTERNAL_ERROR_MESSAGE,
                "code": "internal_error",
            },
        )
