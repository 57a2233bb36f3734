"""SMTP delivery for notification emails."""

from __future__ import annotations

import hashlib
import logging
from email.message import EmailMessage
from typing import Protocol

import aiosmtplib

from hackmate.settings import settings

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    return hashlib.sha256(email.lower().encode("utf-8")).hexdigest()[:12]


class Mailer(Protocol):
    async def send(self, to_email: str, subject: str, body_html: str) -> None: ...


class SmtpMailer:
    """Send through the configured SMTP relay. Delivery errors propagate to the caller."""

    async def send(self, to_email: str, subject: str, body_html: str) -> None:
        msg = EmailMessage()
        msg["From"] = settings.smtp_from_email
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body_html, subtype="html")

        # STARTTLS on 587, implicit TLS on 465
        start_tls = bool(settings.smtp_tls) and int(settings.smtp_port) == 587
        use_tls = bool(settings.smtp_tls) and int(settings.smtp_port) == 465
        await aiosmtplib.send(
            msg,
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            start_tls=start_tls,
            use_tls=use_tls,
        )
        logger.info("Email sent to %s", mask_email(to_email))
