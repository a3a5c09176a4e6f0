"""Application service removing the account behind an authenticated session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from account_lifecycle.application.ports.session_service_port import SessionServicePort
from account_lifecycle.application.ports.user_repository_port import UserRepositoryPort
from account_lifecycle.application.services.lifecycle_options import (
    AccountLifecycleOptions,
    require_capabilities,
)

logger = logging.getLogger(__name__)


class DeregistrationOutcome(StrEnum):
    """Supported unregister outcomes."""

    UNREGISTERED = "unregistered"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class DeregistrationResult:
    """Unregister result model."""

    outcome: DeregistrationOutcome
    user_id: Any = None


class DeregistrationService:
    """Log the caller out, then delete their account.

    Collaborator failures propagate unchanged. Logout always runs before removal,
    so a failed removal still leaves the session terminated.
    """

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        session_service: SessionServicePort,
        options: AccountLifecycleOptions,
    ) -> None:
        require_capabilities(users=users, session_service=session_service, options=options)
        self._users = users
        self._session_service = session_service
        self._options = options

    async def unregister(self, *, request: Any) -> DeregistrationResult:
        """Unregister the account authenticated on this request."""

        user = await self._session_service.is_authenticated(request)
        if user is None:
            logger.info("unregister_rejected reason=unauthenticated")
            return DeregistrationResult(outcome=DeregistrationOutcome.UNAUTHENTICATED)

        user_id = self._options.user_id_getter(user)
        await self._session_service.log_out(request, user)
        await self._users.remove_user(user_id=user_id)

        logger.info("unregister_completed user_id=%s", user_id)
        return DeregistrationResult(outcome=DeregistrationOutcome.UNREGISTERED, user_id=user_id)
