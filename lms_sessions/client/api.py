"""
Async HTTP client for the session administration API.

Thin: one coroutine per endpoint, JSON in, schema objects out.  Any
non-2xx response becomes an `ApiError` carrying the server's `message`
(or FastAPI's `detail`) so views can show it.  No retries and no
timeouts beyond httpx's defaults.
"""

import logging
from typing import Any

import httpx

from lms_sessions.core.config import settings
from lms_sessions.schemas import (
    MessageResponse,
    RevokeAllResponse,
    SessionStats,
    TokenResponse,
    UserOut,
    UserSessionOut,
    UserWithSessionInfo,
)

logger = logging.getLogger(__name__)

ADMIN_PREFIX = "/api/admin"


class ApiError(Exception):
    """A request reached the server and came back with an error status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "Request failed"
    if isinstance(body, dict):
        detail = body.get("message") or body.get("detail")
        if isinstance(detail, str):
            return detail
    return response.reason_phrase or "Request failed"


class AdminApiClient:
    """
    Usage:
        async with AdminApiClient(token=token) as api:
            sessions = await api.list_sessions()

    Pass `http=` to reuse an existing `httpx.AsyncClient` (tests hand in
    one wired to a MockTransport or the ASGI app).
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        http: httpx.AsyncClient | None = None,
    ):
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=base_url or settings.ADMIN_API_BASE_URL)
        self.token = token

    async def __aenter__(self) -> "AdminApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = await self._http.request(method, path, json=json, headers=headers)
        if response.is_error:
            message = _error_message(response)
            logger.debug("%s %s failed: %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        return response.json()

    # ── Auth ─────────────────────────────────────────────────────────
    async def login(self, email: str, password: str) -> TokenResponse:
        data = await self._request("POST", "/api/auth/login", {"email": email, "password": password})
        token = TokenResponse.model_validate(data)
        self.token = token.access_token
        return token

    # ── Queries ──────────────────────────────────────────────────────
    async def list_sessions(self) -> list[UserSessionOut]:
        data = await self._request("GET", f"{ADMIN_PREFIX}/sessions")
        return [UserSessionOut.model_validate(row) for row in data]

    async def list_suspicious_sessions(self) -> list[UserSessionOut]:
        data = await self._request("GET", f"{ADMIN_PREFIX}/sessions/suspicious")
        return [UserSessionOut.model_validate(row) for row in data]

    async def get_session_stats(self) -> SessionStats:
        return SessionStats.model_validate(
            await self._request("GET", f"{ADMIN_PREFIX}/sessions/stats")
        )

    async def list_user_sessions(self, user_id: int) -> list[UserSessionOut]:
        data = await self._request("GET", f"{ADMIN_PREFIX}/users/{user_id}/sessions")
        return [UserSessionOut.model_validate(row) for row in data]

    async def users_sessions_summary(self) -> list[UserWithSessionInfo]:
        data = await self._request("GET", f"{ADMIN_PREFIX}/users/sessions-summary")
        return [UserWithSessionInfo.model_validate(row) for row in data]

    async def get_user(self, user_id: int) -> UserOut:
        return UserOut.model_validate(await self._request("GET", f"{ADMIN_PREFIX}/users/{user_id}"))

    # ── Mutations ────────────────────────────────────────────────────
    async def revoke_session(self, session_id: int, reason: str) -> MessageResponse:
        data = await self._request("DELETE", f"{ADMIN_PREFIX}/sessions/{session_id}", {"reason": reason})
        return MessageResponse.model_validate(data)

    async def mark_suspicious(self, session_id: int) -> MessageResponse:
        data = await self._request("PUT", f"{ADMIN_PREFIX}/sessions/{session_id}/mark-suspicious")
        return MessageResponse.model_validate(data)

    async def revoke_all_user_sessions(self, user_id: int) -> RevokeAllResponse:
        data = await self._request("DELETE", f"{ADMIN_PREFIX}/users/{user_id}/sessions")
        return RevokeAllResponse.model_validate(data)
