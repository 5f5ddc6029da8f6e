"""
Transactional email dispatch.

Emails are rendered and delivered by an external webhook; this module only
builds the payload and posts it. A logging sender stands in for the webhook
in development so no real mail leaves the machine.
"""

import logging
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field

from .config import get_settings
from .exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class EmailType(str, Enum):
    """Templates known to the email webhook."""

    OTP = "OTP"
    PASSWORD_RESET = "PWReset"


class EmailMessage(BaseModel):
    """Payload posted to the email webhook."""

    email_type: EmailType
    email: str
    name: str
    otp_code: Optional[str] = None
    verify_link: Optional[str] = None
    reset_link: Optional[str] = None

    model_config = {"frozen": True}


class EmailDeliveryError(ExternalServiceError):
    """Raised when the email webhook rejects or fails to receive a message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message,
            service="email-webhook",
            code="EMAIL_DELIVERY_FAILED",
            details={"status_code": status_code} if status_code else {},
        )


@runtime_checkable
class IEmailSender(Protocol):
    """Interface for sending transactional emails."""

    async def send(self, message: EmailMessage) -> None:
        """
        Deliver a message.

        Raises:
            EmailDeliveryError: If delivery failed
        """
        ...


class WebhookEmailSender:
    """Posts messages to the email webhook, authenticated with the shared secret."""

    def __init__(
        self,
        url: Optional[str] = None,
        secret: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._url = url or settings.email_webhook_url
        self._secret = secret if secret is not None else settings.webhook_secret
        self._timeout = timeout or settings.email_timeout_seconds
        self._transport = transport

    async def send(self, message: EmailMessage) -> None:
        if not self._secret:
            raise EmailDeliveryError("Server configuration error: missing webhook authentication")

        payload = message.model_dump(mode="json", exclude_none=True)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self._url,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "X-Auth": self._secret,
                    },
                    timeout=self._timeout,
                )
        except httpx.TimeoutException:
            raise EmailDeliveryError(
                f"Email request timed out after {self._timeout:g} seconds"
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email request failed: {e}")

        if response.is_error:
            logger.error(
                f"Email webhook returned {response.status_code} for {message.email_type.value} email"
            )
            raise EmailDeliveryError(
                f"Failed to send {message.email_type.value} email",
                status_code=response.status_code,
            )

        logger.info(f"Sent {message.email_type.value} email")


class LoggingEmailSender:
    """
    Development sender.

    Logs each message instead of delivering it and keeps the messages in
    memory so local tooling and tests can read the codes and links.
    """

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        self.sent.append(message)
        logger.info(
            f"[dev] {message.email_type.value} email to {message.email}: "
            f"code={message.otp_code} verify_link={message.verify_link} "
            f"reset_link={message.reset_link}"
        )

    @property
    def last(self) -> Optional[EmailMessage]:
        """Most recently sent message, if any."""
        return self.sent[-1] if self.sent else None
