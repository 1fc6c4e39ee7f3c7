"""
Authentication schemas.
"""

from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from billboard_api.models.user import UserRole
from billboard_api.schemas.common import CamelModel
from billboard_api.schemas.user import UserResponse

SELF_SERVICE_ROLES = (UserRole.ADVERTISER, UserRole.OWNER)


class RegisterRequest(CamelModel):
    """User registration request schema."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    role: UserRole = UserRole.ADVERTISER

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
        if v not in [r.value for r in SELF_SERVICE_ROLES]:
            raise ValueError("Role must be ADVERTISER or OWNER")
        return v


class ContactMixin(CamelModel):
    """Either an e-mail address or a phone number identifies the account."""

    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)

    @model_validator(mode="after")
    def require_contact(self):
        if not self.email and not self.phone:
            raise ValueError("Email or phone number is required")
        return self


class LoginRequest(ContactMixin):
    """Login request schema."""

    password: str = Field(..., min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class AuthResponse(CamelModel):
    """Token pair plus the authenticated user."""

    message: str
    token: str
    refresh_token: str
    user: UserResponse


class TokenResponse(CamelModel):
    token: str
    refresh_token: str


class PasswordChangeRequest(CamelModel):
    """Password change request schema."""

    current_password: str
    new_password: str = Field(..., min_length=6, max_length=128)


class PasswordResetRequest(ContactMixin):
    pass


class PasswordResetRequestResponse(CamelModel):
    message: str
    delivery_method: Optional[str] = None
    delivered: Optional[bool] = None
    reset_code: Optional[str] = None
    delivery_warning: Optional[str] = None


class VerifyResetCodeRequest(ContactMixin):
    reset_code: str = Field(..., min_length=6, max_length=6)


class VerifyResetCodeResponse(CamelModel):
    message: str
    verified: bool


class ResetPasswordRequest(VerifyResetCodeRequest):
    new_password: str = Field(..., min_length=6, max_length=128)
