"""Syntax checks for account email addresses."""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email


def is_valid_email_address(value: str | None) -> bool:
    """Return whether value is a non-blank, syntactically valid email address.

    Deliverability (DNS) is not checked; only the address syntax matters here.
    """

    if value is None or not value.strip():
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
