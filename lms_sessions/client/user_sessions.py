"""Per-user session detail page."""

import asyncio
import logging
from datetime import datetime

import httpx

from lms_sessions.client.api import AdminApiClient, ApiError
from lms_sessions.client.filtering import STATUS_ALL, USER_SEARCH_FIELDS, filter_sessions
from lms_sessions.client.mutations import Confirm, SessionMutations
from lms_sessions.client.notifications import Notifier
from lms_sessions.client.presentation import SessionRow, render_row
from lms_sessions.client.query_cache import QueryCache, user_key, user_sessions_key
from lms_sessions.client.summary import UserSessionSummary, sort_by_recency, summarize_sessions
from lms_sessions.models.session import SessionStatus
from lms_sessions.schemas import UserOut, UserSessionOut

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load user sessions data. Please try again later."


class UserSessionsView:
    def __init__(
        self,
        api: AdminApiClient,
        user_id: int,
        cache: QueryCache | None = None,
        notifier: Notifier | None = None,
    ):
        if not user_id:
            raise ValueError("user_id is required")
        self.api = api
        self.user_id = user_id
        self.cache = cache or QueryCache()
        self.notifier = notifier or Notifier()

        self.search_term = ""
        self.status_filter: str | SessionStatus = STATUS_ALL
        self.selected_session: UserSessionOut | None = None
        self.revoke_reason = ""
        self.error: str | None = None

        self.mutations = SessionMutations(api, self.cache, self.notifier, lambda: self.user_id)

    async def load(self) -> bool:
        try:
            await asyncio.gather(
                self.cache.fetch(user_key(self.user_id), lambda: self.api.get_user(self.user_id)),
                self.cache.fetch(
                    user_sessions_key(self.user_id),
                    lambda: self.api.list_user_sessions(self.user_id),
                ),
            )
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Loading sessions of user %s failed: %s", self.user_id, exc)
            self.error = LOAD_ERROR
            return False
        self.error = None
        return True

    @property
    def user(self) -> UserOut | None:
        return self.cache.peek(user_key(self.user_id))

    @property
    def sessions(self) -> list[UserSessionOut]:
        return sort_by_recency(self.cache.peek(user_sessions_key(self.user_id)) or [])

    def summary(self) -> UserSessionSummary:
        return summarize_sessions(self.sessions)

    def filtered_sessions(self) -> list[UserSessionOut]:
        return filter_sessions(self.sessions, self.search_term, self.status_filter, USER_SEARCH_FIELDS)

    def rows(self, now: datetime | None = None) -> list[SessionRow]:
        return [render_row(s, now) for s in self.filtered_sessions()]

    @property
    def can_revoke_all(self) -> bool:
        return any(s.status != SessionStatus.REVOKED for s in self.sessions)

    # ── Revoke dialog ────────────────────────────────────────────────
    def begin_revoke(self, session: UserSessionOut) -> None:
        self.selected_session = session
        self.revoke_reason = ""

    def cancel_revoke(self) -> None:
        self.selected_session = None
        self.revoke_reason = ""

    async def confirm_revoke(self) -> bool:
        if self.selected_session is None:
            return False
        ok = await self.mutations.revoke(self.selected_session.id, self.revoke_reason)
        if ok:
            self.cancel_revoke()
        return ok

    async def mark_suspicious(self, session_id: int) -> bool:
        return await self.mutations.mark_suspicious(session_id)

    async def revoke_all(self, confirm: Confirm) -> bool:
        if not self.can_revoke_all:
            return False
        return await self.mutations.revoke_all(self.user_id, confirm)
