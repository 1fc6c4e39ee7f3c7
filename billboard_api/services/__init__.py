"""Business logic services"""

from billboard_api.services.auth import AuthService
from billboard_api.services.billboard import BillboardService
from billboard_api.services.booking import BookingService
from billboard_api.services.complaint import ComplaintService
from billboard_api.services.moderation import ModerationService
from billboard_api.services.notifications import NotificationService
from billboard_api.services.storage import ImageStorage

__all__ = [
    "AuthService",
    "BillboardService",
    "BookingService",
    "ComplaintService",
    "ModerationService",
    "NotificationService",
    "ImageStorage",
]
