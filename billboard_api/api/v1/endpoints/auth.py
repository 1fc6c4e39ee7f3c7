"""
Authentication endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.api.dependencies import get_current_active_user, get_notifier
from billboard_api.core.database import get_db
from billboard_api.models.user import User
from billboard_api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    VerifyResetCodeRequest,
    VerifyResetCodeResponse,
)
from billboard_api.schemas.common import MessageResponse
from billboard_api.schemas.user import ProfileUpdate, ProfileUpdateResponse, UserProfileResponse
from billboard_api.services.auth import AuthService, issue_tokens
from billboard_api.services.notifications import NotificationService

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    *,
    db: AsyncSession = Depends(get_db),
    user_in: RegisterRequest,
) -> Any:
    """
    Register a new advertiser or owner.
    """
    user = await AuthService(db).register(user_in)
    token, refresh_token = issue_tokens(user)
    return {
        "message": "User registered successfully",
        "token": token,
        "refresh_token": refresh_token,
        "user": user,
    }


@router.post("/login", response_model=AuthResponse)
async def login(
    *,
    db: AsyncSession = Depends(get_db),
    credentials: LoginRequest,
) -> Any:
    """
    Log in with e-mail or phone and password.
    """
    user = await AuthService(db).login(credentials)
    token, refresh_token = issue_tokens(user)
    return {
        "message": "Login successful",
        "token": token,
        "refresh_token": refresh_token,
        "user": user,
    }


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    *,
    db: AsyncSession = Depends(get_db),
    token_data: RefreshTokenRequest,
) -> Any:
    """
    Refresh access token using refresh token.
    """
    token, new_refresh_token = await AuthService(db).refresh(token_data.refresh_token)
    return {"token": token, "refresh_token": new_refresh_token}


@router.get("/profile", response_model=UserProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get the current user with profile and admin flag.
    """
    return {"user": current_user}


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    *,
    db: AsyncSession = Depends(get_db),
    profile_in: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Update the current user's profile. Roles are changed by administrators.
    """
    user = await AuthService(db).update_profile(current_user, profile_in)
    return {"message": "Profile updated successfully", "user": user}


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    *,
    db: AsyncSession = Depends(get_db),
    password_data: PasswordChangeRequest,
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Change password for current user.
    """
    await AuthService(db).change_password(
        current_user,
        password_data.current_password,
        password_data.new_password,
    )
    return {"message": "Password changed successfully"}


@router.post(
    "/request-password-reset",
    response_model=PasswordResetRequestResponse,
    response_model_exclude_none=True,
)
async def request_password_reset(
    *,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    reset_in: PasswordResetRequest,
) -> Any:
    """
    Send a six digit reset code by e-mail or SMS.
    """
    return await AuthService(db, notifier).request_password_reset(reset_in)


@router.post("/verify-reset-code", response_model=VerifyResetCodeResponse)
async def verify_reset_code(
    *,
    db: AsyncSession = Depends(get_db),
    verify_in: VerifyResetCodeRequest,
) -> Any:
    """
    Check a reset code before asking for the new password.
    """
    await AuthService(db).verify_reset_code(verify_in)
    return {"message": "Reset code verified successfully.", "verified": True}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    *,
    db: AsyncSession = Depends(get_db),
    reset_in: ResetPasswordRequest,
) -> Any:
    """
    Set a new password using a valid reset code.
    """
    await AuthService(db).reset_password(reset_in)
    return {"message": "Password reset successfully. You can now login with your new password."}
