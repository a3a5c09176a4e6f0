"""Plain-text email templates for account lifecycle notifications."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode


@dataclass(frozen=True)
class EmailContent:
    """Rendered email subject and body."""

    subject: str
    body: str


def build_registration_email(*, username: str) -> EmailContent:
    """Build welcome email sent after a successful registration."""

    return EmailContent(
        subject="Welcome! Your account is ready",
        body=(
            f"Hi {username},\n\n"
            "Your account has been created and you are now signed in.\n"
            "If you did not create this account, please contact support.\n"
        ),
    )


def build_password_reset_email(
    *,
    username: str,
    reset_url: str,
    token: str,
) -> EmailContent:
    """Build email carrying the reset link for an existing account."""

    return EmailContent(
        subject="Reset your password",
        body=(
            f"Hi {username},\n\n"
            "We received a request to reset your password. Use the link below:\n\n"
            f"{build_reset_link(reset_url=reset_url, token=token)}\n\n"
            "If you did not ask for a reset, you can ignore this email.\n"
        ),
    )


def build_unregistered_email_reset_notice(*, email: str) -> EmailContent:
    """Build email telling an address without an account that a reset was requested."""

    return EmailContent(
        subject="Password reset requested",
        body=(
            "Someone asked to reset the password for an account using "
            f"{email}, but no account is registered with this address.\n\n"
            "If this was you, you may have signed up with a different email.\n"
            "Otherwise you can ignore this email.\n"
        ),
    )


def build_reset_link(*, reset_url: str, token: str) -> str:
    """Append the token query parameter to the configured reset page URL."""

    separator = "&" if "?" in reset_url else "?"
    return f"{reset_url}{separator}{urlencode({'token': token})}"
