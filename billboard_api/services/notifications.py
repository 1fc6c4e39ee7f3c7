"""
E-mail and SMS notifications sent on marketplace state changes.

Every send is best effort: failures are logged and reported as False,
never raised into the calling request.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
import httpx

from billboard_api.core.config import Settings, settings as default_settings
from billboard_api.core.logging import get_logger

logger = get_logger(__name__)


def _looks_like_placeholder(value: str) -> bool:
    return "your-" in value.lower()


def _display_name(user) -> str:
    profile = getattr(user, "profile", None)
    if profile is not None:
        return f"{profile.first_name} {profile.last_name}".strip()
    return user.email


class EmailSender:
    """SMTP delivery through aiosmtplib."""

    def __init__(self, settings: Settings):
        self.host = settings.email_host
        self.port = settings.email_port
        self.user = settings.email_user
        self.password = settings.email_password
        self.from_name = settings.email_from_name

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        if not self.is_configured:
            logger.info("email_not_configured", to=to, subject=subject)
            return False

        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{self.from_name} <{self.user}>"
        message["To"] = to
        message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.user,
                password=self.password,
                start_tls=self.port == 587,
                use_tls=self.port == 465,
            )
            logger.info("email_sent", to=to, subject=subject)
            return True
        except Exception as e:
            logger.error("email_send_failed", to=to, subject=subject, error=str(e))
            return False


class SmsSender:
    """Twilio Messages API over httpx."""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.account_sid = settings.twilio_account_sid or ""
        self.auth_token = settings.twilio_auth_token or ""
        self.from_number = settings.twilio_phone_number or ""
        self.base_url = settings.twilio_base_url
        self._client = client

    @property
    def is_configured(self) -> bool:
        values = (self.account_sid, self.auth_token, self.from_number)
        return (
            all(values)
            and not any(_looks_like_placeholder(v) for v in values)
            and self.account_sid.startswith("AC")
        )

    async def send(self, to: str, body: str) -> bool:
        if not self.is_configured:
            logger.info("sms_not_configured", to=to)
            return False

        number = to if to.startswith("+") else f"+{to}"
        url = f"/2010-04-01/Accounts/{self.account_sid}/Messages.json"
        try:
            client = self._client or httpx.AsyncClient(base_url=self.base_url, timeout=10)
            try:
                response = await client.post(
                    url,
                    data={"To": number, "From": self.from_number, "Body": body},
                    auth=(self.account_sid, self.auth_token),
                )
                response.raise_for_status()
            finally:
                if self._client is None:
                    await client.aclose()
            logger.info("sms_sent", to=number)
            return True
        except Exception as e:
            logger.error("sms_send_failed", to=number, error=str(e))
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class NotificationService:
    """Dispatches marketplace notifications through the configured channels."""

    def __init__(
        self,
        settings: Settings = None,
        email: EmailSender = None,
        sms: SmsSender = None,
    ):
        settings = settings or default_settings
        self.email = email or EmailSender(settings)
        self.sms = sms or SmsSender(settings)
        self.brand = settings.app_name

    @property
    def is_email_configured(self) -> bool:
        return self.email.is_configured

    @property
    def is_sms_configured(self) -> bool:
        return self.sms.is_configured

    async def send_password_reset_email(self, to: str, code: str, expires_in_minutes: int) -> bool:
        subject = f"Your {self.brand} password reset code"
        text = (
            f"Your password reset code is {code}. "
            f"It expires in {expires_in_minutes} minutes."
        )
        html = (
            "<div style=\"font-family: Arial, sans-serif;\">"
            "<h2>Password reset</h2>"
            f"<p>Use the code below to reset your password. It expires in {expires_in_minutes} minutes.</p>"
            f"<p style=\"font-size: 24px; font-weight: bold; letter-spacing: 4px;\">{code}</p>"
            "<p>If you did not request a reset you can ignore this message.</p>"
            "</div>"
        )
        return await self.email.send(to, subject, html, text)

    async def send_password_reset_sms(self, to: str, code: str, expires_in_minutes: int) -> bool:
        body = (
            f"Your {self.brand} password reset code is {code}. "
            f"It expires in {expires_in_minutes} minutes."
        )
        return await self.sms.send(to, body)

    async def booking_requested(self, booking) -> bool:
        """Tell the billboard owner a new request is waiting."""
        owner = booking.billboard.owner
        subject = f"New booking request for {booking.billboard.name}"
        text = (
            f"{_display_name(booking.advertiser)} requested {booking.billboard.name} "
            f"from {booking.start_date:%Y-%m-%d} to {booking.end_date:%Y-%m-%d} "
            f"for {booking.total_amount}."
        )
        return await self.email.send(owner.email, subject, f"<p>{text}</p>", text)

    async def booking_decided(self, booking) -> bool:
        """Tell the advertiser the owner approved or rejected the request."""
        decision = booking.status.value.lower()
        subject = f"Your booking request for {booking.billboard.name} was {decision}"
        text = f"Your request for {booking.billboard.name} was {decision}."
        if booking.response_message:
            text += f" Message from the owner: {booking.response_message}"
        return await self.email.send(booking.advertiser.email, subject, f"<p>{text}</p>", text)

    async def dispute_opened(self, booking, opened_by_id: int) -> bool:
        """Tell the counter-party a dispute was raised."""
        owner = booking.billboard.owner
        recipient = owner if opened_by_id == booking.advertiser_id else booking.advertiser
        subject = f"A dispute was opened on booking #{booking.id}"
        text = f"A dispute was opened on your booking of {booking.billboard.name}: {booking.dispute_reason}"
        return await self.email.send(recipient.email, subject, f"<p>{text}</p>", text)

    async def close(self) -> None:
        await self.sms.close()
