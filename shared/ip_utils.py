"""
Client IP resolution for FastAPI requests.
"""

from __future__ import annotations

from fastapi import Request

# Proxy headers checked in priority order
_FORWARDING_HEADERS = ("CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP")


def get_client_ip(request: Request) -> str:
    """Return the originating client IP for *request*.

    The first address of a forwarding header wins; otherwise the direct peer
    address is used. Returns ``""`` when nothing is known.
    """
    for header in _FORWARDING_HEADERS:
        value = request.headers.get(header)
        if value:
            client_ip = value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else ""
