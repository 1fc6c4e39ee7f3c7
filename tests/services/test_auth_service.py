"""
Tests for identity and password reset flows.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from billboard_api.core.exceptions import InvalidInput, Unauthenticated
from billboard_api.core.security import create_access_token, create_refresh_token, verify_password
from billboard_api.models import PasswordReset, UserRole
from billboard_api.schemas.auth import (
    LoginRequest,
    PasswordResetRequest,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyResetCodeRequest,
)
from billboard_api.schemas.user import ProfileUpdate
from billboard_api.services.auth import RESET_REQUESTED_MESSAGE, AuthService


@pytest.fixture
def service(test_db, notifier) -> AuthService:
    return AuthService(test_db, notifier=notifier)


@pytest.mark.auth
class TestRegistration:
    async def test_register_normalizes_email(self, service):
        user = await service.register(RegisterRequest(
            email="New.User@Example.com",
            password="secret123",
            first_name=" New ",
            last_name="User",
            role="owner",
        ))

        assert user.email == "new.user@example.com"
        assert user.role == UserRole.OWNER
        assert user.profile.first_name == "New"
        assert user.is_admin is False
        assert verify_password("secret123", user.hashed_password)

    async def test_duplicate_email(self, service, advertiser):
        with pytest.raises(InvalidInput, match="User with this email already exists"):
            await service.register(RegisterRequest(
                email="ADVERTISER@example.com",
                password="secret123",
                first_name="Dup",
                last_name="User",
            ))

    def test_admin_role_is_not_self_service(self):
        with pytest.raises(ValueError):
            RegisterRequest(
                email="sneaky@example.com",
                password="secret123",
                first_name="Sneaky",
                last_name="User",
                role="ADMIN",
            )


@pytest.mark.auth
class TestLogin:
    async def test_login_by_email_and_phone(self, service, make_user):
        user = await make_user("phone@example.com", phone="+15550001111")

        assert (await service.login(LoginRequest(email="phone@example.com", password="password123"))).id == user.id
        assert (await service.login(LoginRequest(phone="+15550001111", password="password123"))).id == user.id

    async def test_wrong_password(self, service, advertiser):
        with pytest.raises(Unauthenticated, match="Invalid email or password"):
            await service.login(LoginRequest(email=advertiser.email, password="nope"))

    async def test_refresh_rejects_access_token_type(self, service, advertiser):
        new_access, new_refresh = await service.refresh(create_refresh_token(advertiser.id))
        assert new_access and new_refresh

        with pytest.raises(Unauthenticated):
            await service.refresh(new_access)

    async def test_authenticate_inactive_user(self, test_db, service, advertiser):
        advertiser.is_active = False
        await test_db.commit()

        with pytest.raises(Unauthenticated):
            await service.authenticate_token(create_access_token(advertiser.id))


@pytest.mark.user
class TestProfile:
    async def test_update_profile_fields(self, service, advertiser):
        updated = await service.update_profile(
            advertiser, ProfileUpdate(first_name="Renamed", bio="Outdoor media buyer")
        )
        assert updated.profile.first_name == "Renamed"
        assert updated.profile.bio == "Outdoor media buyer"
        assert updated.role == UserRole.ADVERTISER

    async def test_phone_must_be_unique(self, service, make_user, advertiser):
        await make_user("taken@example.com", phone="+15552223333")

        with pytest.raises(InvalidInput):
            await service.update_profile(advertiser, ProfileUpdate(phone="+15552223333"))

    async def test_change_password(self, service, advertiser):
        with pytest.raises(InvalidInput, match="Current password is incorrect"):
            await service.change_password(advertiser, "wrong", "brandnew1")

        await service.change_password(advertiser, "password123", "brandnew1")
        assert verify_password("brandnew1", advertiser.hashed_password)


@pytest.mark.auth
class TestPasswordReset:
    async def test_unknown_account_reveals_nothing(self, service):
        result = await service.request_password_reset(PasswordResetRequest(email="ghost@example.com"))
        assert result == {"message": RESET_REQUESTED_MESSAGE}

    async def test_undelivered_code_is_echoed(self, service, advertiser, notifier):
        result = await service.request_password_reset(PasswordResetRequest(email=advertiser.email))

        assert result["delivery_method"] == "email"
        assert result["delivered"] is False
        assert len(result["reset_code"]) == 6
        assert "delivery_warning" in result
        notifier.send_password_reset_email.assert_awaited_once()

    async def test_full_reset_flow(self, test_db, service, advertiser):
        code = (await service.request_password_reset(
            PasswordResetRequest(email=advertiser.email)
        ))["reset_code"]

        await service.verify_reset_code(VerifyResetCodeRequest(email=advertiser.email, reset_code=code))
        await service.reset_password(ResetPasswordRequest(
            email=advertiser.email, reset_code=code, new_password="fresh-pass"
        ))

        refreshed = await service.get_user(advertiser.id)
        assert verify_password("fresh-pass", refreshed.hashed_password)

        with pytest.raises(InvalidInput):
            await service.reset_password(ResetPasswordRequest(
                email=advertiser.email, reset_code=code, new_password="again-pass"
            ))

    async def test_new_request_burns_previous_code(self, service, advertiser):
        first = (await service.request_password_reset(PasswordResetRequest(email=advertiser.email)))["reset_code"]
        second = (await service.request_password_reset(PasswordResetRequest(email=advertiser.email)))["reset_code"]

        if first != second:
            with pytest.raises(InvalidInput):
                await service.verify_reset_code(VerifyResetCodeRequest(email=advertiser.email, reset_code=first))
        await service.verify_reset_code(VerifyResetCodeRequest(email=advertiser.email, reset_code=second))

    async def test_expired_code(self, test_db, service, advertiser):
        code = (await service.request_password_reset(
            PasswordResetRequest(email=advertiser.email)
        ))["reset_code"]
        reset = (await test_db.execute(
            select(PasswordReset).where(PasswordReset.reset_code == code)
        )).scalar_one()
        reset.expires_at = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=1)
        await test_db.commit()

        with pytest.raises(InvalidInput, match="Invalid or expired reset code"):
            await service.verify_reset_code(VerifyResetCodeRequest(email=advertiser.email, reset_code=code))
