"""FastAPI router exposing register, unregister and forgot-password endpoints."""

from __future__ import annotations

import logging
from typing import TypeVar

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel, ValidationError

from account_lifecycle.application.dto.account_models import (
    PASSWORD_REQUIRED,
    VALID_EMAIL_REQUIRED,
    PasswordResetRequest,
    RegisterRequest,
)
from account_lifecycle.application.dto.registration_input import RegistrationInput
from account_lifecycle.application.services.deregistration_service import (
    DeregistrationOutcome,
    DeregistrationService,
)
from account_lifecycle.application.services.lifecycle_options import AccountLifecycleOptions
from account_lifecycle.application.services.password_reset_service import PasswordResetService
from account_lifecycle.application.services.registration_service import RegistrationService
from account_lifecycle.application.services.workflow_errors import (
    WorkflowError,
    WorkflowValidationError,
)
from account_lifecycle.domain.account.email_address import is_valid_email_address
from account_lifecycle.infrastructure.http.cookie_session_service import CookieSessionService
from account_lifecycle.infrastructure.http.outcome_handlers import OutcomeHandlers

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)


def build_account_router(
    *,
    registration_service: RegistrationService,
    deregistration_service: DeregistrationService,
    password_reset_service: PasswordResetService,
    session_service: CookieSessionService,
    options: AccountLifecycleOptions,
    outcome_handlers: OutcomeHandlers | None = None,
) -> APIRouter:
    """Build router wiring HTTP requests to the lifecycle workflows."""

    handlers = outcome_handlers or OutcomeHandlers()
    router = APIRouter(tags=["accounts"])

    @router.post("/register")
    async def register(request: Request) -> Response:
        payload = await _parse_body(request, RegisterRequest)
        errors = validate_register_request(payload)
        if errors:
            return handlers.registration_validation_errors(errors)

        web_session = session_service.open_session(request)
        registration = RegistrationInput(
            email=payload.email,
            password=payload.password,
            username=payload.username or payload.email,
        )
        try:
            user = await registration_service.register(
                request=web_session,
                registration=registration,
            )
        except WorkflowError as error:
            return handlers.workflow_failed(error)

        response = handlers.registered(user, options.user_id_getter(user))
        return session_service.write_cookie(web_session, response)

    @router.post("/unregister")
    async def unregister(request: Request) -> Response:
        web_session = session_service.open_session(request)
        try:
            result = await deregistration_service.unregister(request=web_session)
        except Exception as error:  # noqa: BLE001
            logger.warning(
                "unregister_failed session_cleared=%s error=%s",
                web_session.cleared,
                error,
            )
            failure = handlers.workflow_failed(WorkflowError.from_error(error))
            return session_service.write_cookie(web_session, failure)
        if result.outcome is DeregistrationOutcome.UNAUTHENTICATED:
            return session_service.unauthenticated_response()

        return session_service.write_cookie(web_session, handlers.unregistered())

    @router.post("/forgotpassword")
    async def forgot_password(request: Request) -> Response:
        payload = await _parse_body(request, PasswordResetRequest)
        try:
            result = await password_reset_service.request_password_reset(email=payload.email)
        except WorkflowValidationError as error:
            return handlers.password_reset_validation_errors(error.errors)
        except WorkflowError as error:
            return handlers.workflow_failed(error)

        return handlers.password_reset_email_sent(result.email)

    return router


def validate_register_request(payload: RegisterRequest) -> dict[str, str]:
    """Return field -> message for every missing or malformed registration field."""

    errors: dict[str, str] = {}
    if not is_valid_email_address(payload.email):
        errors["email"] = VALID_EMAIL_REQUIRED
    if not payload.password or not payload.password.strip():
        errors["password"] = PASSWORD_REQUIRED
    return errors


async def _parse_body(request: Request, model: type[ModelT]) -> ModelT:
    """Read a JSON or form body into `model`; unreadable bodies become an empty model."""

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        raw: object = {key: value for key, value in form.items() if isinstance(value, str)}
    else:
        try:
            raw = await request.json()
        except ValueError:
            raw = {}

    if not isinstance(raw, dict):
        raw = {}
    raw = {key: _as_text(value) for key, value in raw.items()}
    try:
        return model.model_validate(raw)
    except ValidationError:
        return model()


def _as_text(value: object) -> str | None:
    """Render JSON scalars as the text a form post would carry; containers become absent."""

    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return None
