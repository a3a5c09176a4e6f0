"""Development notifier that writes account emails to the process log."""

from __future__ import annotations

import logging

from account_lifecycle.application.ports.user_repository_port import UserRecord
from account_lifecycle.infrastructure.email.message_templates import (
    EmailContent,
    build_password_reset_email,
    build_registration_email,
    build_unregistered_email_reset_notice,
)

logger = logging.getLogger(__name__)

_TOKEN_PREVIEW_CHARS = 6


class LoggingAccountNotifier:
    """Implements the notifier port via logging; used when SMTP is not configured.

    Reset tokens are logged only as a short prefix.
    """

    def __init__(self, *, reset_url: str) -> None:
        self._reset_url = reset_url

    async def send_registration_email(self, user: UserRecord) -> None:
        self._log(to=user.email, content=build_registration_email(username=user.username))

    async def send_password_reset_email(self, user: UserRecord, token: str) -> None:
        preview = f"{token[:_TOKEN_PREVIEW_CHARS]}..."
        content = build_password_reset_email(
            username=user.username,
            reset_url=self._reset_url,
            token=preview,
        )
        self._log(to=user.email, content=content)

    async def send_password_reset_notification_for_unregistered_email(self, email: str) -> None:
        self._log(to=email, content=build_unregistered_email_reset_notice(email=email))

    def _log(self, *, to: str, content: EmailContent) -> None:
        logger.info("email_logged to=%s subject=%r\n%s", to, content.subject, content.body)
