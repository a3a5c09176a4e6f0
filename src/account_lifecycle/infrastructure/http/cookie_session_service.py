"""Session service backed by an HTTP-only cookie and persisted token hashes."""

from __future__ import annotations

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from account_lifecycle.application.ports.auth_session_repository_port import (
    AuthSessionCreateInput,
    AuthSessionRepositoryPort,
)
from account_lifecycle.application.ports.session_service_port import SessionServicePort
from account_lifecycle.application.ports.user_repository_port import (
    UserRecord,
    UserRepositoryPort,
)
from account_lifecycle.infrastructure.http.web_session import WebSession
from account_lifecycle.infrastructure.security.token_service import OpaqueTokenService

UNAUTHENTICATED_DETAIL = "authentication required"

logger = logging.getLogger(__name__)


class CookieSessionService(SessionServicePort):
    """Resolve, establish and terminate login sessions carried by `WebSession`."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        auth_sessions: AuthSessionRepositoryPort,
        token_service: OpaqueTokenService,
        cookie_secure: bool = False,
    ) -> None:
        self._users = users
        self._auth_sessions = auth_sessions
        self._token_service = token_service
        self._cookie_secure = cookie_secure

    def open_session(self, request: Request) -> WebSession:
        """Build the per-request session handle from request cookies."""

        return WebSession.from_request(request)

    def write_cookie(self, session: WebSession, response: Response) -> Response:
        """Copy pending cookie changes onto the response and return it."""

        session.write_cookie(response, secure=self._cookie_secure)
        return response

    async def is_authenticated(self, request: WebSession) -> UserRecord | None:
        if request.incoming_token is None:
            return None

        token_hash = self._token_service.hash_token(request.incoming_token)
        record = await self._auth_sessions.get_active_by_hash(token_hash=token_hash)
        if record is None:
            return None
        return await self._users.get_by_id(user_id=record.user_id)

    async def log_out(self, request: WebSession, user: UserRecord) -> None:
        if request.incoming_token is not None:
            token_hash = self._token_service.hash_token(request.incoming_token)
            revoked = await self._auth_sessions.revoke_by_hash(token_hash=token_hash)
            logger.info("session_logged_out user_id=%s revoked=%s", user.user_id, revoked)
        request.clear()

    async def mark_logged_in_after_authentication(
        self,
        request: WebSession,
        user: UserRecord,
    ) -> None:
        issued = self._token_service.issue_token()
        await self._auth_sessions.create_session(
            AuthSessionCreateInput(
                user_id=user.user_id,
                token_hash=issued.token_hash,
                expires_at=issued.expires_at,
            )
        )
        request.establish(token=issued.token, expires_at=issued.expires_at)
        logger.info("session_established user_id=%s", user.user_id)

    def unauthenticated_response(self) -> Response:
        return JSONResponse(status_code=401, content={"detail": UNAUTHENTICATED_DETAIL})
