"""Database models package"""

from billboard_api.models.base import Base, BaseModel
from billboard_api.models.billboard import Billboard, BillboardStatus
from billboard_api.models.booking import (
    LIVE_BOOKING_STATUSES,
    BookingRequest,
    BookingStatus,
    DisputeStatus,
)
from billboard_api.models.complaint import Complaint, ComplaintStatus
from billboard_api.models.password_reset import PasswordReset, ResetMethod
from billboard_api.models.user import AdminFlag, Profile, User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Profile",
    "AdminFlag",
    "UserRole",
    "Billboard",
    "BillboardStatus",
    "BookingRequest",
    "BookingStatus",
    "DisputeStatus",
    "LIVE_BOOKING_STATUSES",
    "Complaint",
    "ComplaintStatus",
    "PasswordReset",
    "ResetMethod",
]
