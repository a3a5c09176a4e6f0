"""Port for account lifecycle email notifications."""

from __future__ import annotations

from typing import Protocol

from account_lifecycle.application.ports.user_repository_port import UserRecord


class AccountNotifierPort(Protocol):
    """Notifier contract."""

    async def send_registration_email(self, user: UserRecord) -> None:
        """Welcome a newly registered account."""

    async def send_password_reset_email(self, user: UserRecord, token: str) -> None:
        """Deliver a reset token to the account owner."""

    async def send_password_reset_notification_for_unregistered_email(self, email: str) -> None:
        """Tell an address with no account that a reset was requested for it."""
