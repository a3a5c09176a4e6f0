"""Transient registration payload handed from the transport to the workflow."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RegistrationInput:
    """Registration fields; `password` is cleared by the workflow once hashed."""

    email: str | None
    password: str | None = field(default=None, repr=False)
    username: str | None = None

    @property
    def effective_username(self) -> str | None:
        """Return the explicit username, falling back to the email address."""

        return self.username or self.email
