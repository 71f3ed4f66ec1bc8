# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email delivery using async SMTP.

Verification codes are sent with aiosmtplib as a multipart message with
plain text and HTML alternatives.

Configuration (via environment variables):
- SMTP_HOST: SMTP server hostname (default: smtp.gmail.com)
- SMTP_PORT: SMTP server port (default: 587)
- SMTP_USERNAME: SMTP authentication username (required)
- SMTP_PASSWORD: SMTP authentication password (required)
- SMTP_USE_TLS: Use STARTTLS (default: true)
- SMTP_FROM_EMAIL: Sender email address (default: SMTP_USERNAME)
- SMTP_FROM_NAME: Sender display name
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import TYPE_CHECKING

import aiosmtplib

if TYPE_CHECKING:
    from zimlearn.core.config.settings import SMTPSettings

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify your ZimLearn account"


class EmailDeliveryError(Exception):
    """Raised when a message could not be handed to the SMTP server."""


class EmailSender:
    """Sends account emails over SMTP.

    Attributes:
        _settings: SMTP settings.
    """

    def __init__(self, settings: "SMTPSettings") -> None:
        """Initialize the sender.

        Args:
            settings: SMTP settings.
        """
        self._settings = settings

    async def send_verification_code(self, to_email: str, name: str, code: str) -> str:
        """Email a verification code.

        Args:
            to_email: Recipient address.
            name: Recipient display name.
            code: 6-digit verification code.

        Returns:
            Message-ID of the sent message.

        Raises:
            EmailDeliveryError: If the SMTP exchange fails.
        """
        text_body = (
            f"Hello {name},\n\n"
            f"Your ZimLearn verification code is: {code}\n\n"
            "Enter this code in the app to activate your account.\n"
        )
        html_body = (
            f"<p>Hello {name},</p>"
            f"<p>Your ZimLearn verification code is: <strong>{code}</strong></p>"
            "<p>Enter this code in the app to activate your account.</p>"
        )
        return await self.send(to_email, VERIFICATION_SUBJECT, text_body, html_body)

    async def send(
        self,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: str | None = None,
    ) -> str:
        """Send a message.

        Args:
            to_email: Recipient address.
            subject: Subject line.
            text_body: Plain text body.
            html_body: Optional HTML alternative.

        Returns:
            Message-ID of the sent message.

        Raises:
            EmailDeliveryError: If the SMTP exchange fails.
        """
        message = self._build_message(to_email, subject, text_body, html_body)

        try:
            await aiosmtplib.send(
                message,
                hostname=self._settings.host,
                port=self._settings.port,
                username=self._settings.username,
                password=self._settings.password.get_secret_value(),
                start_tls=self._settings.use_tls,
                timeout=self._settings.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to_email, str(e), exc_info=True)
            raise EmailDeliveryError(f"SMTP error: {e}") from e

        logger.info("Email sent to %s: %s", to_email, subject)
        return message["Message-ID"]

    def _build_message(
        self,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: str | None,
    ) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["From"] = f"{self._settings.from_name} <{self._settings.sender}>"
        message["To"] = to_email
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain="zimlearn")

        message.attach(MIMEText(text_body, "plain", "utf-8"))
        if html_body:
            message.attach(MIMEText(html_body, "html", "utf-8"))
        return message
