"""Errors raised by capability adapters when a dependency call fails."""

from __future__ import annotations


class CapabilityError(Exception):
    """Dependency failure that may carry its own response status code."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UserAlreadyExistsError(CapabilityError):
    """Raised by the user store when the email is already registered."""

    status_code = 409

    def __init__(self, *, email: str) -> None:
        super().__init__("email already registered")
        self.email = email


class UserNotFoundError(CapabilityError):
    """Raised by the user store when removing an unknown account."""

    status_code = 404

    def __init__(self, *, user_id: object) -> None:
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


class NotificationDeliveryError(CapabilityError):
    """Raised by notifiers when a message could not be handed to the transport."""
