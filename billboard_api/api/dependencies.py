"""
API dependencies for authentication and authorization.
"""

from typing import Callable, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.core.access import Caller, ensure_admin, ensure_role
from billboard_api.core.config import settings
from billboard_api.core.database import get_db
from billboard_api.core.exceptions import Unauthenticated
from billboard_api.models.user import User, UserRole
from billboard_api.schemas.common import PageParams
from billboard_api.services.auth import AuthService
from billboard_api.services.notifications import NotificationService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get the current authenticated user.

    Raises:
        Unauthenticated: If the token is missing, invalid, expired or its
            user no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Access token required")
    return await AuthService(db).authenticate_token(credentials.credentials)


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Get the current active user."""
    if not current_user.is_active:
        raise Unauthenticated("Account is deactivated")
    return current_user


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Get the current user if authenticated, otherwise return None.

    Public endpoints tailor their results to a caller without requiring one.
    """
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await AuthService(db).authenticate_token(credentials.credentials)
    except Unauthenticated:
        return None


async def get_current_caller(
    current_user: User = Depends(get_current_active_user),
) -> Caller:
    return Caller.from_user(current_user)


async def get_optional_caller(
    current_user: Optional[User] = Depends(get_optional_current_user),
) -> Optional[Caller]:
    return Caller.from_user(current_user) if current_user is not None else None


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory gating an endpoint on the caller's profile role."""

    async def dependency(caller: Caller = Depends(get_current_caller)) -> Caller:
        ensure_role(caller, roles)
        return caller

    return dependency


async def require_admin(caller: Caller = Depends(get_current_caller)) -> Caller:
    """Admin-only endpoints check the admin flag."""
    ensure_admin(caller)
    return caller


def get_notifier(request: Request) -> NotificationService:
    """Notification service built at startup."""
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        notifier = NotificationService(settings)
        request.app.state.notifier = notifier
    return notifier


def get_page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
) -> PageParams:
    return PageParams(page=page, limit=limit)
