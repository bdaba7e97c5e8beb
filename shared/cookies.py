"""
Credential cookie helpers.

The signed token travels in a single httpOnly cookie whose lifetime matches
the token's validity window.
"""

from __future__ import annotations

from fastapi import Response

from config import CookieSettings


def set_auth_cookie(
    response: Response, token: str, settings: CookieSettings, max_age: int
) -> Response:
    response.set_cookie(
        settings.cookie_name,
        value=token,
        max_age=max_age,
        path="/",
        domain=settings.cookie_domain,
        secure=bool(settings.cookie_secure),
        httponly=True,
        samesite=settings.cookie_samesite,
    )
    return response


def clear_auth_cookie(response: Response, settings: CookieSettings) -> Response:
    # Attributes must match the ones used when setting, or browsers keep it
    response.delete_cookie(
        settings.cookie_name,
        path="/",
        domain=settings.cookie_domain,
        secure=bool(settings.cookie_secure),
        httponly=True,
        samesite=settings.cookie_samesite,
    )
    return response
