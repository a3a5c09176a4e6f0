"""Application service driving new-account registration."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from account_lifecycle.application.dto.registration_input import RegistrationInput
from account_lifecycle.application.ports.account_notifier_port import AccountNotifierPort
from account_lifecycle.application.ports.password_hasher_port import PasswordHasherPort
from account_lifecycle.application.ports.session_service_port import SessionServicePort
from account_lifecycle.application.ports.user_repository_port import (
    UserCreateInput,
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

MISSING_CREDENTIALS_MESSAGE = "Must provide email & password"
REGISTRATION_FAILED_MESSAGE = "Could not register user"

logger = logging.getLogger(__name__)


class RegistrationService:
    """Hash credentials, persist the account, notify and log the new user in.

    Steps run strictly in order. The registration email is best effort: its
    failure is logged and the workflow continues. Session establishment is
    not: when it fails the account stays persisted but the caller gets an error.
    """

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
        session_service: SessionServicePort,
        notifier: AccountNotifierPort,
        options: AccountLifecycleOptions,
    ) -> None:
        require_capabilities(
            users=users,
            password_hasher=password_hasher,
            session_service=session_service,
            notifier=notifier,
            options=options,
        )
        self._users = users
        self._password_hasher = password_hasher
        self._session_service = session_service
        self._notifier = notifier
        self._options = options

    async def register(self, *, request: Any, registration: RegistrationInput) -> UserRecord:
        """Register one account and return the persisted record."""

        if not registration.email or not registration.password:
            raise WorkflowValidationError(MISSING_CREDENTIALS_MESSAGE)

        password_hash = await self._hash_and_discard_password(registration)
        payload = UserCreateInput(
            email=registration.email,
            username=registration.effective_username or registration.email,
            password_hash=password_hash,
        )

        try:
            user = await self._users.add_user(payload)
        except Exception as error:  # noqa: BLE001
            logger.warning("registration_store_failed error=%s", error)
            raise WorkflowError.from_error(error) from error

        user_id = self._options.user_id_getter(user)

        try:
            await self._notifier.send_registration_email(user)
        except Exception as error:  # noqa: BLE001
            logger.error("registration_email_failed user_id=%s error=%s", user_id, error)

        try:
            await self._session_service.mark_logged_in_after_authentication(request, user)
        except Exception as error:  # noqa: BLE001
            logger.error("registration_login_failed user_id=%s error=%s", user_id, error)
            raise WorkflowError(message=str(error), status_code=500) from error

        logger.info("registration_completed user_id=%s", user_id)
        return user

    async def _hash_and_discard_password(self, registration: RegistrationInput) -> str:
        """Hash the plaintext off the event loop and clear it from the input."""

        plaintext = registration.password
        registration.password = None
        assert plaintext is not None
        try:
            return await asyncio.to_thread(self._password_hasher.hash_password, plaintext)
        except Exception as error:  # noqa: BLE001
            logger.error("registration_hash_failed error=%s", type(error).__name__)
            raise WorkflowError(message=REGISTRATION_FAILED_MESSAGE, status_code=500) from error
