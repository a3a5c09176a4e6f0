"""Port for credential hashing and verification."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Credential hasher contract."""

    def hash_password(self, password: str) -> str:
        """Turn a plaintext secret into an opaque verifiable hash."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Verify plaintext password against stored hash."""
