# cinelist/utils/email_utils.py
from __future__ import annotations

"""
Cinelist — Email Utilities
==========================
Plain-text transactional mail (magic sign-in links) over `smtplib`.

- When SMTP is not configured (dev/test) the message is logged instead of sent.
- TLS via SMTPS (465) or STARTTLS (other ports); login when credentials exist.
- `send_magic_link_email` is async and runs the blocking SMTP call in a thread.

Public API
----------
- send_email(to_email, subject, body)            # sync text
- await send_magic_link_email(email, link)       # async
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage

from cinelist.core.config import settings
from cinelist.core.exceptions import AuthError

logger = logging.getLogger(__name__)


def _mailto(addr: str) -> str:
    addr = (addr or "").strip()
    if "@" not in addr or any(c in addr for c in "\r\n"):
        raise AuthError("Invalid recipient email")
    return addr


def send_email(to_email: str, subject: str, body: str) -> None:
    """
    Send a **plain text** email via `smtplib` (synchronous).

    Raises
    ------
    AuthError
        When SMTP is configured but sending fails; the sign-in link was not delivered.
    """
    recipient = _mailto(to_email)
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.EMAIL_FROM or "no-reply@cinelist.local"
    msg["To"] = recipient
    msg.set_content(body or "")

    if not settings.smtp_enabled:
        logger.info("📨 [DRY-RUN] Email to=%s subject=%s\n%s", recipient, subject, body)
        return

    username = settings.SMTP_USERNAME
    password = settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else None
    try:
        if settings.SMTP_PORT == 465:
            ctx = ssl.create_default_context()
            with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, context=ctx, timeout=20) as server:
                if username and password:
                    server.login(username, password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=20) as server:
                server.ehlo()
                server.starttls(context=ssl.create_default_context())
                if username and password:
                    server.login(username, password)
                server.send_message(msg)
        logger.info("📨 Email sent to %s (subject=%s)", recipient, subject)
    except Exception as e:
        logger.exception("❌ SMTP send failed (to=%s subject=%s)", recipient, subject)
        raise AuthError("Could not send the sign-in email") from e


async def send_magic_link_email(email: str, link: str) -> None:
    subject = "Your Cinelist sign-in link"
    body = (
        "Hi!\n\n"
        "Use the link below to sign in to Cinelist. It can be used once and "
        f"expires in {settings.MAGIC_LINK_TTL_MINUTES} minutes.\n\n"
        f"{link}\n\n"
        "If you did not request it, you can ignore this email.\n"
    )
    await asyncio.to_thread(send_email, email, subject, body)


__all__ = ["send_email", "send_magic_link_email"]
