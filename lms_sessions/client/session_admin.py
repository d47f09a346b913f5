"""
Main session administration screen.

Holds the UI state (tab, search, status filter, selected user, revoke
dialog) and derives what to render from the query cache.  `load()`
fetches the independent queries concurrently; a failure of any of them
replaces the screen with a blocking error message.
"""

import asyncio
import logging
from datetime import datetime

import httpx

from lms_sessions.client.api import AdminApiClient, ApiError
from lms_sessions.client.filtering import STATUS_ALL, SessionTab, filter_sessions, select_tab_sessions
from lms_sessions.client.mutations import Confirm, SessionMutations
from lms_sessions.client.notifications import Notifier
from lms_sessions.client.presentation import SessionRow, format_count, render_row
from lms_sessions.client.query_cache import (
    ALL_SESSIONS,
    SESSION_STATS,
    SUSPICIOUS_SESSIONS,
    QueryCache,
    user_sessions_key,
)
from lms_sessions.models.session import SessionStatus
from lms_sessions.schemas import SessionStats, UserSessionOut

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load session data. Please try again later."


class SessionAdminView:
    def __init__(
        self,
        api: AdminApiClient,
        cache: QueryCache | None = None,
        notifier: Notifier | None = None,
    ):
        self.api = api
        self.cache = cache or QueryCache()
        self.notifier = notifier or Notifier()

        self.active_tab = SessionTab.ALL
        self.search_term = ""
        self.status_filter: str | SessionStatus = STATUS_ALL
        self.selected_user_id: int | None = None
        self.selected_session: UserSessionOut | None = None
        self.revoke_reason = ""
        self.error: str | None = None

        self.mutations = SessionMutations(
            api, self.cache, self.notifier, lambda: self.selected_user_id
        )

    # ── Loading ──────────────────────────────────────────────────────
    async def load(self) -> bool:
        fetches = [
            self.cache.fetch(ALL_SESSIONS, self.api.list_sessions),
            self.cache.fetch(SUSPICIOUS_SESSIONS, self.api.list_suspicious_sessions),
            self.cache.fetch(SESSION_STATS, self.api.get_session_stats),
        ]
        user_id = self.selected_user_id
        if user_id:
            fetches.append(
                self.cache.fetch(user_sessions_key(user_id), lambda: self.api.list_user_sessions(user_id))
            )
        try:
            await asyncio.gather(*fetches)
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Loading session data failed: %s", exc)
            self.error = LOAD_ERROR
            return False
        self.error = None
        return True

    @property
    def all_sessions(self) -> list[UserSessionOut]:
        return self.cache.peek(ALL_SESSIONS) or []

    @property
    def suspicious_sessions(self) -> list[UserSessionOut]:
        return self.cache.peek(SUSPICIOUS_SESSIONS) or []

    @property
    def user_sessions(self) -> list[UserSessionOut]:
        if not self.selected_user_id:
            return []
        return self.cache.peek(user_sessions_key(self.selected_user_id)) or []

    @property
    def stats(self) -> SessionStats | None:
        return self.cache.peek(SESSION_STATS)

    # ── Derived view ─────────────────────────────────────────────────
    def visible_sessions(self) -> list[UserSessionOut]:
        source = select_tab_sessions(
            self.active_tab,
            all_sessions=self.all_sessions,
            suspicious_sessions=self.suspicious_sessions,
            user_sessions=self.user_sessions,
            selected_user_id=self.selected_user_id,
        )
        return filter_sessions(source, self.search_term, self.status_filter)

    def rows(self, now: datetime | None = None) -> list[SessionRow]:
        return [render_row(s, now) for s in self.visible_sessions()]

    def stat_cards(self) -> dict[str, str]:
        stats = self.stats
        return {
            "Total Sessions": format_count(stats.total_sessions if stats else None),
            "Active Sessions": format_count(stats.active_sessions if stats else None),
            "Suspicious Sessions": format_count(stats.suspicious_sessions if stats else None),
            "Unique Users": format_count(stats.distinct_users if stats else None),
        }

    def set_tab(self, tab: SessionTab | str) -> None:
        self.active_tab = SessionTab(tab)

    def view_user_sessions(self, user_id: int) -> None:
        self.selected_user_id = user_id
        self.active_tab = SessionTab.USER

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
        ok = await self.revoke(self.selected_session.id, self.revoke_reason)
        if ok:
            self.cancel_revoke()
        return ok

    # ── Mutations ────────────────────────────────────────────────────
    async def revoke(self, session_id: int, reason: str | None = None) -> bool:
        return await self.mutations.revoke(session_id, reason)

    async def mark_suspicious(self, session_id: int) -> bool:
        return await self.mutations.mark_suspicious(session_id)

    async def revoke_all(self, user_id: int, confirm: Confirm) -> bool:
        return await self.mutations.revoke_all(user_id, confirm)
