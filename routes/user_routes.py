"""
User endpoints.

GET /user/data — profile of the authenticated caller
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_auth_service
from middleware.auth import AuthContext, require_auth
from schemas.dto.responses.auth import UserData, UserDataResponse
from services.auth_service import AuthService

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/data", response_model=UserDataResponse)
async def user_data(
    ctx: AuthContext = Depends(require_auth),
    auth: AuthService = Depends(get_auth_service),
) -> UserDataResponse:
    user = await auth.get_user_data(ctx.user_id)
    return UserDataResponse(
        success=True, message="ok", user_data=UserData.from_user(user)
    )
