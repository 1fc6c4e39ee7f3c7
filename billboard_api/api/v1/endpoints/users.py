"""
Current user endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.api.dependencies import get_current_active_user
from billboard_api.core.database import get_db
from billboard_api.models.user import User
from billboard_api.schemas.user import ProfileUpdate, UserResponse
from billboard_api.services.auth import AuthService

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def read_user_me(
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get current user.
    """
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_user_me(
    *,
    db: AsyncSession = Depends(get_db),
    user_in: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Update current user.
    """
    return await AuthService(db).update_profile(current_user, user_in)
