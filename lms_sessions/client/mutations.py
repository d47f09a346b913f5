"""
Session mutations shared by the admin and per-user views.

Each mutation follows the same sequence:
  1. call the API
  2. on success, invalidate every cached query the change can make stale
     and push a success toast
  3. on failure, push a destructive toast and leave the cache alone

Nothing is refetched here; the owning view reloads on its next `load()`.
"""

import inspect
import logging
from typing import Awaitable, Callable

import httpx

from lms_sessions.client.api import AdminApiClient, ApiError
from lms_sessions.client.notifications import Notifier
from lms_sessions.client.query_cache import QueryCache, session_dependent_keys, user_sessions_key
from lms_sessions.core.config import settings

logger = logging.getLogger(__name__)

REVOKE_ALL_CONFIRMATION = "Are you sure you want to revoke all sessions for this user?"

Confirm = Callable[[str], bool | Awaitable[bool]]


def resolve_reason(reason: str | None) -> str:
    """Blank or whitespace-only reasons fall back to the default."""
    if reason is None or not reason.strip():
        return settings.DEFAULT_REVOCATION_REASON
    return reason.strip()


async def ask(confirm: Confirm, message: str) -> bool:
    answer = confirm(message)
    if inspect.isawaitable(answer):
        answer = await answer
    return bool(answer)


class SessionMutations:
    def __init__(
        self,
        api: AdminApiClient,
        cache: QueryCache,
        notifier: Notifier,
        selected_user_id: Callable[[], int | None],
    ):
        self.api = api
        self.cache = cache
        self.notifier = notifier
        self._selected_user_id = selected_user_id

    def _invalidate(self, affected_user_id: int | None = None) -> None:
        keys = session_dependent_keys(self._selected_user_id())
        if affected_user_id is not None and user_sessions_key(affected_user_id) not in keys:
            keys.append(user_sessions_key(affected_user_id))
        self.cache.invalidate_many(keys)

    async def revoke(self, session_id: int, reason: str | None = None) -> bool:
        try:
            await self.api.revoke_session(session_id, resolve_reason(reason))
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Revoking session %s failed: %s", session_id, exc)
            self.notifier.failure(
                "Failed to revoke session",
                "An error occurred while revoking the session.",
            )
            return False
        self._invalidate()
        self.notifier.success("Session revoked successfully", "The user session has been revoked.")
        return True

    async def mark_suspicious(self, session_id: int) -> bool:
        try:
            await self.api.mark_suspicious(session_id)
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Marking session %s suspicious failed: %s", session_id, exc)
            self.notifier.failure(
                "Failed to mark session",
                "An error occurred while marking the session as suspicious.",
            )
            return False
        self._invalidate()
        self.notifier.success("Session marked as suspicious", "The session has been flagged for review.")
        return True

    async def revoke_all(self, user_id: int, confirm: Confirm) -> bool:
        """Returns False without touching the network when the admin declines."""
        if not await ask(confirm, REVOKE_ALL_CONFIRMATION):
            return False
        try:
            await self.api.revoke_all_user_sessions(user_id)
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Revoking all sessions of user %s failed: %s", user_id, exc)
            self.notifier.failure(
                "Failed to revoke sessions",
                "An error occurred while revoking all sessions.",
            )
            return False
        self._invalidate(user_id)
        self.notifier.success("All sessions revoked", "All sessions for this user have been revoked.")
        return True
