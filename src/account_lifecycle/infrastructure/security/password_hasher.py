"""Bcrypt adapter for account password hashes."""

from __future__ import annotations

import bcrypt

from account_lifecycle.application.ports.password_hasher_port import PasswordHasherPort

_DEFAULT_ROUNDS = 12
# bcrypt only reads the first 72 bytes of its input.
_MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher(PasswordHasherPort):
    """Salted bcrypt hashes with a configurable work factor.

    Passwords longer than bcrypt's input limit are refused instead of being
    silently truncated.
    """

    def __init__(self, *, rounds: int = _DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    def hash_password(self, password: str) -> str:
        encoded = _encode(password)
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode("ascii")

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
        except ValueError:
            return False


def _encode(password: str) -> bytes:
    encoded = password.encode("utf-8")
    if len(encoded) > _MAX_PASSWORD_BYTES:
        raise ValueError(f"password exceeds {_MAX_PASSWORD_BYTES} bytes")
    return encoded
