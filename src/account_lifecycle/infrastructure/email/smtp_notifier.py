"""SMTP notifier delivering account emails through a relay."""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage

from account_lifecycle.application.ports.capability_errors import NotificationDeliveryError
from account_lifecycle.application.ports.user_repository_port import UserRecord
from account_lifecycle.infrastructure.email.message_templates import (
    EmailContent,
    build_password_reset_email,
    build_registration_email,
    build_unregistered_email_reset_notice,
)

logger = logging.getLogger(__name__)

_IMPLICIT_TLS_PORT = 465
_DEFAULT_TIMEOUT_SECONDS = 20.0


class SmtpAccountNotifier:
    """Send account emails with `smtplib`, off the event loop.

    Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
    Delivery failures raise `NotificationDeliveryError`.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        reset_url: str,
        username: str | None = None,
        password: str | None = None,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._reset_url = reset_url
        self._username = username
        self._password = password
        self._timeout_seconds = timeout_seconds

    async def send_registration_email(self, user: UserRecord) -> None:
        await self._deliver(to=user.email, content=build_registration_email(username=user.username))

    async def send_password_reset_email(self, user: UserRecord, token: str) -> None:
        content = build_password_reset_email(
            username=user.username,
            reset_url=self._reset_url,
            token=token,
        )
        await self._deliver(to=user.email, content=content)

    async def send_password_reset_notification_for_unregistered_email(self, email: str) -> None:
        await self._deliver(to=email, content=build_unregistered_email_reset_notice(email=email))

    async def _deliver(self, *, to: str, content: EmailContent) -> None:
        message = EmailMessage()
        message["Subject"] = content.subject
        message["From"] = self._sender
        message["To"] = to
        message.set_content(content.body)

        try:
            await asyncio.to_thread(self._send_message, message)
        except (smtplib.SMTPException, OSError) as error:
            logger.warning("smtp_delivery_failed subject=%r error=%s", content.subject, error)
            raise NotificationDeliveryError(f"could not deliver email: {error}") from error
        logger.info("smtp_delivery_ok subject=%r", content.subject)

    def _send_message(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self._port == _IMPLICIT_TLS_PORT:
            with smtplib.SMTP_SSL(
                self._host,
                self._port,
                context=context,
                timeout=self._timeout_seconds,
            ) as server:
                self._login_and_send(server, message)
            return

        with smtplib.SMTP(self._host, self._port, timeout=self._timeout_seconds) as server:
            server.ehlo()
            server.starttls(context=context)
            self._login_and_send(server, message)

    def _login_and_send(self, server: smtplib.SMTP, message: EmailMessage) -> None:
        if self._username and self._password:
            server.login(self._username, self._password)
        server.send_message(message)
