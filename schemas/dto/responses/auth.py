"""
Response DTOs for account endpoints.

UserData          — public view of a user
UserDataResponse  — GET /user/data  (200)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.dto.responses.common import MessageResponse
from schemas.models.user import UserDoc


class UserData(BaseModel):
    """Public profile fields; never includes hashes or pending codes."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    name: Optional[str] = None
    verified: bool

    @classmethod
    def from_user(cls, user: UserDoc) -> "UserData":
        return cls(email=user.email, name=user.name, verified=user.verified)


class UserDataResponse(MessageResponse):
    """Response body for GET /user/data (200)."""

    user_data: UserData
