"""
Transactional email sender.

Welcome and farewell mails are sent over SMTP from a background task, after
the HTTP response has been produced. Delivery problems are logged and never
reach the request that triggered them.
"""
import logging
import smtplib
from email.mime.text import MIMEText

from app.config import settings

logger = logging.getLogger("uvicorn.error")


def _deliver(to: str, subject: str, body: str) -> None:
    """Open an SMTP connection and send one plain-text message."""
    msg = MIMEText(body, "plain")
    msg["From"] = settings.mail_from
    msg["To"] = to
    msg["Subject"] = subject

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
        if settings.smtp_use_tls:
            server.starttls()  # Enable TLS encryption
        if settings.smtp_username and settings.smtp_password:
            server.login(settings.smtp_username, settings.smtp_password)
        server.send_message(msg)


def send_email(to: str, subject: str, body: str) -> bool:
    """
    Send an email, swallowing any failure.

    Returns True when the message was handed to the SMTP server. Meant to be
    scheduled with BackgroundTasks, which runs sync callables in the thread pool.
    """
    if not settings.smtp_host or not settings.mail_from:
        logger.info("[mail] SMTP not configured, skipping mail to %s: %s", to, subject)
        return False
    try:
        _deliver(to, subject, body)
    except Exception:
        logger.warning("[mail] failed to send %r to %s", subject, to, exc_info=True)
        return False
    logger.info("[mail] sent %r to %s", subject, to)
    return True


def send_welcome_email(email: str, name: str) -> bool:
    return send_email(
        email,
        "Thanks for joining in!",
        f"Welcome to the App, {name}. Let me know how you get along with the App.",
    )


def send_farewell_email(email: str, name: str) -> bool:
    return send_email(
        email,
        "User removed successfully!",
        f"We will miss you, {name}. Let me know what made you delete your account. Thanks.",
    )
