"""Immutable options shared by the account lifecycle workflows."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from account_lifecycle.application.ports.user_repository_port import UserRecord

DEFAULT_TOKEN_TTL_MINUTES = 60

UserIdGetter = Callable[[UserRecord], Any]


class MissingCapabilityError(ValueError):
    """Raised when a workflow is built without one of its collaborators."""

    def __init__(self, *, names: list[str]) -> None:
        super().__init__(f"required capabilities missing: {', '.join(names)}")
        self.names = names


def require_capabilities(**capabilities: object) -> None:
    """Fail fast when any named collaborator is absent."""

    missing = sorted(name for name, capability in capabilities.items() if capability is None)
    if missing:
        raise MissingCapabilityError(names=missing)


@dataclass(frozen=True)
class AccountLifecycleOptions:
    """Configuration value created once and handed to every workflow.

    `invalidate_previous_reset_tokens` removes earlier outstanding reset tokens
    for an email before a new one is stored; it is off unless enabled.
    """

    user_id_getter: UserIdGetter
    token_ttl_minutes: int = DEFAULT_TOKEN_TTL_MINUTES
    invalidate_previous_reset_tokens: bool = False

    def __post_init__(self) -> None:
        if not callable(self.user_id_getter):
            raise TypeError("user_id_getter must be callable")
        if (
            isinstance(self.token_ttl_minutes, bool)
            or not isinstance(self.token_ttl_minutes, int)
            or self.token_ttl_minutes <= 0
        ):
            raise ValueError("token_ttl_minutes must be a positive integer")
