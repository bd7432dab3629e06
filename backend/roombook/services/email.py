# backend/roombook/services/email.py
"""
Email Service for the Roombook platform

Delivers email through a pluggable provider with bounded retries:

- "console": logs the message instead of sending (development, tests)
- "resend": Resend API

send_email never raises for delivery failures; it returns an
EmailSendResult so the caller can audit the outcome.
"""

from dataclasses import dataclass
import logging
import re
import time
from typing import Any, Callable, Dict, Optional, Protocol

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ServiceException
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailSendResult:
    success: bool
    attempts: int
    error: Optional[str] = None
    provider_id: Optional[str] = None


class EmailProvider(Protocol):
    def send(self, to_email: str, subject: str, html_content: str, text_content: str) -> Optional[str]:
        """Deliver one message; return a provider message id; raise on failure."""
        ...


class ConsoleEmailProvider:
    """Logs messages instead of sending them."""

    def send(self, to_email: str, subject: str, html_content: str, text_content: str) -> Optional[str]:
        logger.info("[console email] to=%s subject=%s\n%s", to_email, subject, text_content)
        return None


class ResendEmailProvider:
    """Sends through the Resend API."""

    def __init__(self, api_key: str, sender: str):
        resend.api_key = api_key
        self.sender = sender

    def send(self, to_email: str, subject: str, html_content: str, text_content: str) -> Optional[str]:
        response: Dict[str, Any] = resend.Emails.send(
            {
                "from": self.sender,
                "to": to_email,
                "subject": subject,
                "html": html_content,
                "text": text_content,
            }
        )
        return response.get("id") if isinstance(response, dict) else None


def build_email_provider() -> EmailProvider:
    """Create the provider selected by EMAIL_PROVIDER."""
    if settings.email_provider == "resend":
        api_key = settings.resend_key_value()
        if not api_key:
            raise ServiceException("Resend API key not configured")
        return ResendEmailProvider(api_key, settings.email_sender)
    return ConsoleEmailProvider()


class EmailService(BaseService):
    """
    Service for sending emails with retry.

    Extends BaseService for consistent architecture and metrics collection.
    """

    def __init__(
        self,
        db: Session,
        provider: Optional[EmailProvider] = None,
        max_retries: Optional[int] = None,
        retry_delay_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(db)
        self.provider = provider or build_email_provider()
        self.max_retries = max_retries or settings.email_max_retries
        self.retry_delay_seconds = (
            settings.email_retry_delay_seconds if retry_delay_seconds is None else retry_delay_seconds
        )
        self._sleep = sleep

    @staticmethod
    def _html_to_text(html_content: str) -> str:
        """Convert HTML content to plain text for better deliverability"""
        text = re.sub(r"<[^>]+>", "", html_content)
        text = re.sub(r"\s+", " ", text)
        return text.strip()

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> EmailSendResult:
        """
        Send an email, retrying up to max_retries times with a fixed delay.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            text_content: Optional plain text version

        Returns:
            EmailSendResult with the attempt count and last error
        """
        text_content = text_content or self._html_to_text(html_content)
        last_error: Optional[str] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                provider_id = self.provider.send(to_email, subject, html_content, text_content)
                self.logger.info(f"Email sent to {to_email} - Subject: {subject} (attempt {attempt})")
                return EmailSendResult(success=True, attempts=attempt, provider_id=provider_id)
            except Exception as e:
                last_error = str(e) or type(e).__name__
                self.logger.warning(
                    f"Email attempt {attempt}/{self.max_retries} to {to_email} failed: {last_error}"
                )
                if attempt < self.max_retries and self.retry_delay_seconds > 0:
                    self._sleep(self.retry_delay_seconds)

        self.log_operation("email_failed", to_email=to_email, subject=subject, error=last_error)
        return EmailSendResult(success=False, attempts=self.max_retries, error=last_error)
