"""account-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from datetime import timedelta
from uuid import UUID

import uvicorn
from fastapi import FastAPI, Request, Response

from account_lifecycle.application.ports.account_notifier_port import AccountNotifierPort
from account_lifecycle.application.ports.capability_errors import CapabilityError
from account_lifecycle.application.ports.password_hasher_port import PasswordHasherPort
from account_lifecycle.application.ports.user_repository_port import UserRecord
from account_lifecycle.application.services.deregistration_service import DeregistrationService
from account_lifecycle.application.services.lifecycle_options import AccountLifecycleOptions
from account_lifecycle.application.services.password_reset_service import PasswordResetService
from account_lifecycle.application.services.registration_service import RegistrationService
from account_lifecycle.application.services.workflow_errors import WorkflowError
from account_lifecycle.config.settings import Settings, load_settings
from account_lifecycle.infrastructure.db.auth_session_repository import (
    SqlAlchemyAuthSessionRepository,
)
from account_lifecycle.infrastructure.db.password_reset_token_repository import (
    SqlAlchemyPasswordResetTokenRepository,
)
from account_lifecycle.infrastructure.db.session import create_session_factory
from account_lifecycle.infrastructure.db.user_repository import SqlAlchemyUserRepository
from account_lifecycle.infrastructure.email.logging_notifier import LoggingAccountNotifier
from account_lifecycle.infrastructure.email.smtp_notifier import SmtpAccountNotifier
from account_lifecycle.infrastructure.http.account_router import build_account_router
from account_lifecycle.infrastructure.http.cookie_session_service import CookieSessionService
from account_lifecycle.infrastructure.http.outcome_handlers import OutcomeHandlers
from account_lifecycle.infrastructure.logging import configure_logging
from account_lifecycle.infrastructure.security.password_hasher import BcryptPasswordHasher
from account_lifecycle.infrastructure.security.token_service import OpaqueTokenService

ACCOUNT_API_HOST = "0.0.0.0"
ACCOUNT_API_PORT = 8000
logger = logging.getLogger(__name__)


def user_id_of(user: UserRecord) -> UUID:
    """Extract the stable account identity used in responses and logs."""

    return user.user_id


def build_notifier(settings: Settings) -> AccountNotifierPort:
    """Build SMTP notifier when configured, otherwise the logging notifier."""

    reset_url = str(settings.password_reset_url)
    if settings.smtp_enabled:
        assert settings.smtp_host is not None
        assert settings.smtp_from is not None
        return SmtpAccountNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_from,
            reset_url=reset_url,
            username=settings.smtp_username,
            password=settings.smtp_password,
        )
    logger.warning("smtp_not_configured notifier=logging")
    return LoggingAccountNotifier(reset_url=reset_url)


def create_app(
    *,
    database_url: str | None = None,
    options: AccountLifecycleOptions | None = None,
    notifier: AccountNotifierPort | None = None,
    password_hasher: PasswordHasherPort | None = None,
    token_service: OpaqueTokenService | None = None,
    outcome_handlers: OutcomeHandlers | None = None,
    cookie_secure: bool | None = None,
) -> FastAPI:
    """Create FastAPI app serving the account lifecycle routes."""

    settings = None
    if database_url is None or options is None or notifier is None or cookie_secure is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        if database_url is None:
            database_url = settings.database_url
        if options is None:
            options = AccountLifecycleOptions(
                user_id_getter=user_id_of,
                token_ttl_minutes=settings.reset_token_ttl_minutes,
                invalidate_previous_reset_tokens=settings.invalidate_previous_reset_tokens,
            )
        if notifier is None:
            notifier = build_notifier(settings)
        if cookie_secure is None:
            cookie_secure = settings.session_cookie_secure
        if token_service is None:
            token_service = OpaqueTokenService(
                token_ttl=timedelta(hours=settings.session_ttl_hours),
            )

    if password_hasher is None:
        password_hasher = BcryptPasswordHasher()
    if token_service is None:
        token_service = OpaqueTokenService()

    assert database_url is not None
    assert options is not None
    assert notifier is not None
    assert cookie_secure is not None

    handlers = outcome_handlers or OutcomeHandlers()
    session_factory = create_session_factory(database_url)
    users = SqlAlchemyUserRepository(session_factory)
    session_service = CookieSessionService(
        users=users,
        auth_sessions=SqlAlchemyAuthSessionRepository(session_factory),
        token_service=token_service,
        cookie_secure=cookie_secure,
    )

    app = FastAPI()
    app.include_router(
        build_account_router(
            registration_service=RegistrationService(
                users=users,
                password_hasher=password_hasher,
                session_service=session_service,
                notifier=notifier,
                options=options,
            ),
            deregistration_service=DeregistrationService(
                users=users,
                session_service=session_service,
                options=options,
            ),
            password_reset_service=PasswordResetService(
                users=users,
                reset_tokens=SqlAlchemyPasswordResetTokenRepository(session_factory),
                notifier=notifier,
                options=options,
            ),
            session_service=session_service,
            options=options,
            outcome_handlers=handlers,
        )
    )

    @app.exception_handler(CapabilityError)
    async def capability_error_handler(request: Request, exc: CapabilityError) -> Response:
        logger.warning(
            "capability_error path=%s status_code=%s error=%s",
            request.url.path,
            exc.status_code,
            exc,
        )
        return handlers.workflow_failed(WorkflowError.from_error(exc))

    return app


def run_asgi_server(*, host: str = ACCOUNT_API_HOST, port: int = ACCOUNT_API_PORT) -> None:
    """Run account-api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.account_api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run account-api runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
