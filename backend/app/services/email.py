# backend/app/services/email.py
"""
Email Service for the HubContent platform

Sends plain-text notification emails through the configured provider:
``resend`` talks to the Resend API, ``console`` only logs the message (local
development and tests).
"""

import logging
from typing import Any, Dict, Optional

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ServiceException
from .base import BaseService

logger = logging.getLogger(__name__)


class EmailService(BaseService):
    """
    Service for sending emails.

    Extends BaseService for consistent architecture, metrics collection,
    and standardized error handling. Uses dependency injection pattern.
    """

    def __init__(self, db: Session, provider: Optional[str] = None):
        """
        Initialize email service with dependencies.

        Args:
            db: Database session (required by BaseService)
            provider: Override of ``settings.email_provider``
        """
        super().__init__(db)
        self.provider = (provider or settings.email_provider).lower()
        self.from_email = settings.from_email

        if self.provider == "resend":
            api_key = settings.resend_api_key
            if not api_key:
                raise ServiceException("Resend API key not configured")
            resend.api_key = api_key

    @BaseService.measure_operation("send_email")
    def send_email(self, to_email: str, subject: str, text_content: str) -> Dict[str, Any]:
        """
        Send a plain-text email.

        Args:
            to_email: Recipient email address
            subject: Email subject
            text_content: Message body

        Returns:
            Provider response (``{"id": None}`` for the console provider)

        Raises:
            ServiceException: If email sending fails
        """
        if self.provider == "console":
            self.logger.info(f"[console email] to={to_email} subject={subject!r}\n{text_content}")
            return {"id": None}

        try:
            response = resend.Emails.send(
                {
                    "from": self.from_email,
                    "to": to_email,
                    "subject": subject,
                    "text": text_content,
                }
            )
            self.logger.info(f"Email sent successfully to {to_email} - Subject: {subject}")
            return dict(response)
        except Exception as e:
            error_msg = str(e) or "Unknown error"
            self.logger.error(f"Failed to send email to {to_email}: {error_msg}")
            raise ServiceException(f"Email sending failed: {error_msg}") from e
