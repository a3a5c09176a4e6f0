"""Application service issuing password-reset tokens."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from account_lifecycle.application.ports.account_notifier_port import AccountNotifierPort
from account_lifecycle.application.ports.password_reset_token_repository_port import (
    PasswordResetTokenRepositoryPort,
)
from account_lifecycle.application.ports.user_repository_port import (
    UserRecord,
    UserRepositoryPort,
)
from account_lifecycle.application.services.lifecycle_options import (
    AccountLifecycleOptions,
    require_capabilities,
)
from account_lifecycle.application.services.workflow_errors import (
    WorkflowError,
    WorkflowValidationError,
)
from account_lifecycle.domain.account.email_address import is_valid_email_address
from account_lifecycle.domain.account.password_reset_token import issue_password_reset_token

INVALID_EMAIL_MESSAGE = "Valid email address required"

logger = logging.getLogger(__name__)


class InvalidResetEmailError(WorkflowValidationError):
    """Raised when a reset is requested without a well-formed email address."""

    def __init__(self) -> None:
        super().__init__(INVALID_EMAIL_MESSAGE, errors={"email": INVALID_EMAIL_MESSAGE})


@dataclass(frozen=True)
class PasswordResetResult:
    """Reset request result; identical whether or not the email has an account."""

    email: str


class PasswordResetService:
    """Issue and send a reset token, or notify an address that has no account.

    Both branches return the same result shape. They do not take the same time
    or hit the same collaborators, so latency can still hint at account existence.
    """

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        reset_tokens: PasswordResetTokenRepositoryPort,
        notifier: AccountNotifierPort,
        options: AccountLifecycleOptions,
        now: Callable[[], datetime] | None = None,
        token_factory: Callable[[], str] | None = None,
    ) -> None:
        require_capabilities(
            users=users,
            reset_tokens=reset_tokens,
            notifier=notifier,
            options=options,
        )
        self._users = users
        self._reset_tokens = reset_tokens
        self._notifier = notifier
        self._options = options
        self._now = now
        self._token_factory = token_factory

    async def request_password_reset(self, *, email: str | None) -> PasswordResetResult:
        """Handle one forgot-password request for an email address."""

        if email is None or not is_valid_email_address(email):
            raise InvalidResetEmailError()

        try:
            user = await self._users.get_by_email(email=email)
            if user is None:
                await self._notifier.send_password_reset_notification_for_unregistered_email(email)
                logger.info("password_reset_requested account=missing")
            else:
                await self._issue_and_send_token(user=user, email=email)
        except Exception as error:  # noqa: BLE001
            logger.warning("password_reset_failed error=%s", error)
            raise WorkflowError.from_error(error) from error

        return PasswordResetResult(email=email)

    async def _issue_and_send_token(self, *, user: UserRecord, email: str) -> None:
        """Store a fresh token for the account and email it to the owner."""

        if self._options.invalidate_previous_reset_tokens:
            removed = await self._reset_tokens.remove_by_email(email=email)
            logger.info("password_reset_previous_tokens_removed count=%s", removed)

        token = issue_password_reset_token(
            email=email,
            ttl_minutes=self._options.token_ttl_minutes,
            now=self._now,
            token_factory=self._token_factory,
        )
        await self._reset_tokens.add_token(token)
        await self._notifier.send_password_reset_email(user, token.token)
        logger.info(
            "password_reset_requested account=found user_id=%s expires_at=%s",
            self._options.user_id_getter(user),
            token.expires_at.isoformat(),
        )
