"""
Identity service: registration, credentials, profiles and password resets.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import JWTError
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.core.config import settings
from billboard_api.core.exceptions import InvalidInput, NotFound, Unauthenticated
from billboard_api.core.logging import get_logger
from billboard_api.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    subject_from_token,
    verify_password,
)
from billboard_api.models.password_reset import PasswordReset, ResetMethod
from billboard_api.models.user import Profile, User
from billboard_api.schemas.auth import (
    LoginRequest,
    PasswordResetRequest,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyResetCodeRequest,
)
from billboard_api.schemas.user import ProfileUpdate
from billboard_api.services.notifications import NotificationService
from billboard_api.services.queries import USER_OPTIONS

logger = get_logger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists with this information, a reset code has been sent."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def issue_tokens(user: User) -> Tuple[str, str]:
    """Return an access/refresh token pair for a user."""
    return create_access_token(subject=user.id), create_refresh_token(subject=user.id)


class AuthService:
    """Service for user identity and credentials."""

    def __init__(self, db: AsyncSession, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier

    async def get_user(self, user_id: int) -> Optional[User]:
        """Get a user with profile and admin flag loaded."""
        result = await self.db.execute(
            select(User)
            .where(User.id == user_id)
            .options(*USER_OPTIONS)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User)
            .where(func.lower(User.email) == email.strip().lower())
            .options(*USER_OPTIONS)
        )
        return result.scalar_one_or_none()

    async def get_user_by_phone(self, phone: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.phone == phone.strip()).options(*USER_OPTIONS)
        )
        return result.scalar_one_or_none()

    async def _find_by_contact(self, email: Optional[str], phone: Optional[str]) -> Optional[User]:
        if email:
            return await self.get_user_by_email(email)
        return await self.get_user_by_phone(phone)

    async def authenticate_token(self, token: str) -> User:
        """Resolve an access token to an existing, active user."""
        try:
            user_id = subject_from_token(token, "access")
        except JWTError:
            raise Unauthenticated("Invalid or expired token")

        user = await self.get_user(user_id)
        if user is None or not user.is_active:
            raise Unauthenticated("Invalid or expired token")
        return user

    async def register(self, data: RegisterRequest) -> User:
        """Create a user with its profile."""
        email = data.email.strip().lower()
        if await self.get_user_by_email(email):
            raise InvalidInput("User with this email already exists")
        if data.phone and await self.get_user_by_phone(data.phone):
            raise InvalidInput("User with this phone number already exists")

        user = User(
            email=email,
            phone=data.phone.strip() if data.phone else None,
            hashed_password=get_password_hash(data.password),
            is_active=True,
            is_verified=False,
        )
        user.profile = Profile(
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            role=data.role,
        )
        self.db.add(user)
        await self.db.commit()

        logger.info("user_registered", user_id=user.id, role=data.role.value)
        return await self.get_user(user.id)

    async def login(self, data: LoginRequest) -> User:
        """Check credentials; any mismatch is the same 401."""
        user = await self._find_by_contact(data.email, data.phone)
        if user is None or not verify_password(data.password, user.hashed_password):
            logger.info("login_failed", email=data.email, phone=data.phone)
            raise Unauthenticated("Invalid email or password")
        if not user.is_active:
            raise Unauthenticated("Account is deactivated")

        logger.info("user_logged_in", user_id=user.id)
        return user

    async def refresh(self, refresh_token: str) -> Tuple[str, str]:
        """Exchange a refresh token for a new token pair."""
        try:
            user_id = subject_from_token(refresh_token, "refresh")
        except JWTError:
            raise Unauthenticated("Invalid refresh token")

        user = await self.get_user(user_id)
        if user is None or not user.is_active:
            raise Unauthenticated("Invalid refresh token")
        return issue_tokens(user)

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        """Update display data. Role changes go through the admin endpoint."""
        update_data = data.model_dump(exclude_unset=True)

        phone = update_data.pop("phone", None)
        if "phone" in data.model_fields_set:
            phone = phone.strip() if phone else None
            if phone and phone != user.phone:
                existing = await self.get_user_by_phone(phone)
                if existing is not None and existing.id != user.id:
                    raise InvalidInput("User with this phone number already exists")
            user.phone = phone

        for field, value in update_data.items():
            setattr(user.profile, field, value)

        await self.db.commit()
        logger.info("profile_updated", user_id=user.id, fields=sorted(data.model_fields_set))
        return await self.get_user(user.id)

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.hashed_password):
            raise InvalidInput("Current password is incorrect")

        user.hashed_password = get_password_hash(new_password)
        await self.db.commit()
        logger.info("password_changed", user_id=user.id)

    async def request_password_reset(self, data: PasswordResetRequest) -> Dict[str, Any]:
        """Issue a reset code without revealing whether the account exists."""
        method = ResetMethod.EMAIL if data.email else ResetMethod.PHONE
        contact = data.email.strip().lower() if data.email else data.phone.strip()

        user = await self._find_by_contact(data.email, data.phone)
        if user is None:
            return {"message": RESET_REQUESTED_MESSAGE}

        code = f"{secrets.randbelow(900000) + 100000}"
        ttl = settings.password_reset_code_ttl_minutes

        await self.db.execute(
            update(PasswordReset)
            .where(PasswordReset.user_id == user.id, PasswordReset.is_used.is_(False))
            .values(is_used=True)
        )
        self.db.add(PasswordReset(
            user_id=user.id,
            reset_code=code,
            method=method,
            contact_value=contact,
            expires_at=_utcnow() + timedelta(minutes=ttl),
        ))
        await self.db.commit()

        delivered = False
        configured = False
        if self.notifier is not None:
            if method == ResetMethod.EMAIL:
                configured = self.notifier.is_email_configured
                delivered = await self.notifier.send_password_reset_email(contact, code, ttl)
            else:
                configured = self.notifier.is_sms_configured
                delivered = await self.notifier.send_password_reset_sms(contact, code, ttl)

        if not delivered:
            logger.warning("password_reset_delivery_failed", user_id=user.id, method=method.value)

        payload: Dict[str, Any] = {
            "message": RESET_REQUESTED_MESSAGE,
            "delivery_method": method.value,
            "delivered": delivered,
        }
        if not delivered or not settings.is_production:
            payload["reset_code"] = code
        if not configured:
            channel = "Email" if method == ResetMethod.EMAIL else "SMS"
            payload["delivery_warning"] = (
                f"{channel} credentials are not configured. Reset code shown for testing."
            )

        logger.info("password_reset_requested", user_id=user.id, method=method.value)
        return payload

    async def _live_reset(self, email: Optional[str], phone: Optional[str], code: str) -> Tuple[User, PasswordReset]:
        user = await self._find_by_contact(email, phone)
        if user is None:
            raise InvalidInput("Invalid reset code")

        result = await self.db.execute(
            select(PasswordReset).where(
                PasswordReset.user_id == user.id,
                PasswordReset.reset_code == code,
                PasswordReset.is_used.is_(False),
                PasswordReset.expires_at > _utcnow(),
            )
        )
        reset = result.scalars().first()
        if reset is None:
            raise InvalidInput("Invalid or expired reset code")
        return user, reset

    async def verify_reset_code(self, data: VerifyResetCodeRequest) -> None:
        _, reset = await self._live_reset(data.email, data.phone, data.reset_code)
        reset.attempts += 1
        await self.db.commit()

    async def reset_password(self, data: ResetPasswordRequest) -> None:
        """Set a new password and burn every outstanding code."""
        user, reset = await self._live_reset(data.email, data.phone, data.reset_code)

        user.hashed_password = get_password_hash(data.new_password)
        reset.is_used = True
        await self.db.execute(
            update(PasswordReset)
            .where(
                PasswordReset.user_id == user.id,
                PasswordReset.id != reset.id,
                PasswordReset.is_used.is_(False),
            )
            .values(is_used=True)
        )
        await self.db.commit()
        logger.info("password_reset_completed", user_id=user.id)

    async def require_user(self, user_id: int) -> User:
        user = await self.get_user(user_id)
        if user is None:
            raise NotFound("User not found")
        return user
