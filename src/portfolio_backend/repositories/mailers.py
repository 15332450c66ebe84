"""Mailer implementations.

SmtpMailer is used when EMAIL_USER and EMAIL_PASS are set; otherwise
LoggingMailer records what would have been sent.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from portfolio_backend.config import Settings
from portfolio_backend.entities import EmailJob
from portfolio_backend.protocols import Mailer

logger = logging.getLogger(__name__)


class SmtpMailer:
    """Sends mail over SMTP with implicit TLS.

    smtplib is blocking, so each send runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender_name: str = "Portfolio",
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = f'"{sender_name}" <{username}>'
        self._timeout = timeout

    async def send(self, job: EmailJob) -> None:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = job.to
        message["Subject"] = job.subject
        message.set_content("This message requires an HTML-capable mail client.")
        message.add_alternative(job.html, subtype="html")
        await asyncio.to_thread(self._deliver, message)
        logger.info("Email sent to %s: %s", job.to, job.subject)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout) as smtp:
            smtp.login(self._username, self._password)
            smtp.send_message(message)


class LoggingMailer:
    """Mailer used when no SMTP credentials are configured."""

    async def send(self, job: EmailJob) -> None:
        logger.info("Email would be sent to %s: %s", job.to, job.subject)


def create_mailer(settings: Settings) -> Mailer:
    """Pick the mailer for the current configuration."""
    if settings.email_user and settings.email_pass:
        logger.info("Email transporter configured (%s:%d)", settings.smtp_host, settings.smtp_port)
        return SmtpMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.email_user,
            password=settings.email_pass,
            sender_name=settings.email_sender_name,
        )
    logger.warning("Email credentials missing, emails will be logged only")
    return LoggingMailer()
