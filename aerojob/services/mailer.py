"""
Email notifications.

SMTP is used when SMTP_HOST is configured (SSL when SMTP_USE_SSL=true,
STARTTLS otherwise). Without it, messages are written to the log so local
development works with no mail server.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from aerojob.core.config import get_settings

logger = logging.getLogger(__name__)


def build_message(to: str, subject: str, text: str, html: Optional[str] = None,
                  reply_to: Optional[str] = None, sender: Optional[str] = None) -> EmailMessage:
    settings = get_settings()
    message = EmailMessage()
    message["From"] = sender or settings.email_from
    message["To"] = to
    message["Subject"] = subject
    if reply_to:
        message["Reply-To"] = reply_to
    message.set_content(text)
    if html:
        message.add_alternative(html, subtype="html")
    return message


def send_mail(to: str, subject: str, text: str, html: Optional[str] = None,
              reply_to: Optional[str] = None) -> bool:
    """
    Send an email.

    Returns:
        True if handed to the SMTP server (or logged in dev mode).

    Raises:
        smtplib.SMTPException / OSError on delivery failure
    """
    settings = get_settings()
    message = build_message(to, subject, text, html=html, reply_to=reply_to)

    if not settings.smtp_configured:
        logger.info("[DEV MAIL] to=%s subject=%s\n%s", to, subject, text)
        return True

    if settings.smtp_use_ssl:
        server = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds)
    else:
        server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds)

    with server:
        if not settings.smtp_use_ssl:
            server.starttls()
        if settings.smtp_user and settings.smtp_password:
            server.login(settings.smtp_user, settings.smtp_password)
        server.send_message(message)

    logger.info("Email sent to %s: %s", to, subject)
    return True


def send_welcome_email(to: str, first_name: str) -> bool:
    """
    Welcome email after registration. Runs as a background task, so
    delivery failures are logged rather than raised.
    """
    subject = "Welcome to AeroJob"
    text = (
        f"Hi {first_name},\n\n"
        "Your AeroJob account is ready. Log in to browse job openings and "
        "answer the surveys available to you.\n\n"
        "The AeroJob Team"
    )
    html = (
        f"<p>Hi {first_name},</p>"
        "<p>Your AeroJob account is ready. Log in to browse job openings and "
        "answer the surveys available to you.</p>"
        "<p>The AeroJob Team</p>"
    )
    try:
        return send_mail(to, subject, text, html=html)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Welcome email to %s failed: %s", to, e)
        return False
