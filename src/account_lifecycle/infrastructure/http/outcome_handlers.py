"""Mapping from workflow outcomes to HTTP responses, with per-outcome overrides."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, fields, replace
from typing import Any

from fastapi import Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse

from account_lifecycle.application.ports.user_repository_port import UserRecord
from account_lifecycle.application.services.workflow_errors import WorkflowError

OPAQUE_FAILURE_DETAIL = "Could not complete request"


def default_registered(user: UserRecord, user_id: Any) -> Response:
    _ = user
    return JSONResponse(status_code=201, content=jsonable_encoder(user_id))


def default_validation_errors(errors: dict[str, str]) -> Response:
    return JSONResponse(status_code=400, content=errors)


def default_unregistered() -> Response:
    return Response(status_code=200)


def default_password_reset_email_sent(email: str) -> Response:
    return PlainTextResponse(f"Password reset email sent to: {email}", status_code=200)


def default_workflow_failed(error: WorkflowError) -> Response:
    """Expose the message of client errors only; server failures stay opaque."""

    detail = error.message if error.status_code < 500 else OPAQUE_FAILURE_DETAIL
    return JSONResponse(status_code=error.status_code, content={"detail": detail})


@dataclass(frozen=True)
class OutcomeHandlers:
    """One response builder per terminal outcome; every outcome has a default."""

    registered: Callable[[UserRecord, Any], Response] = default_registered
    registration_validation_errors: Callable[[dict[str, str]], Response] = (
        default_validation_errors
    )
    unregistered: Callable[[], Response] = default_unregistered
    password_reset_validation_errors: Callable[[dict[str, str]], Response] = (
        default_validation_errors
    )
    password_reset_email_sent: Callable[[str], Response] = default_password_reset_email_sent
    workflow_failed: Callable[[WorkflowError], Response] = default_workflow_failed

    def __post_init__(self) -> None:
        for handler_field in fields(self):
            if not callable(getattr(self, handler_field.name)):
                raise TypeError(f"outcome handler must be callable: {handler_field.name}")

    def with_overrides(self, **overrides: Callable[..., Response]) -> OutcomeHandlers:
        """Return a copy with selected handlers replaced; unknown names are rejected."""

        known = {handler_field.name for handler_field in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"unknown outcome handlers: {', '.join(unknown)}")
        return replace(self, **overrides)
