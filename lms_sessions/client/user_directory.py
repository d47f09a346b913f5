"""User directory with per-user session counts."""

import logging

import httpx

from lms_sessions.client.api import AdminApiClient, ApiError
from lms_sessions.client.filtering import filter_users
from lms_sessions.client.query_cache import USERS_SESSIONS_SUMMARY, QueryCache
from lms_sessions.schemas import UserWithSessionInfo

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load users. Please try again later."


def sessions_path(user_id: int) -> str:
    return f"/admin/users/{user_id}/sessions"


class UserDirectoryView:
    def __init__(self, api: AdminApiClient, cache: QueryCache | None = None):
        self.api = api
        self.cache = cache or QueryCache()
        self.search_term = ""
        self.error: str | None = None

    async def load(self) -> bool:
        try:
            await self.cache.fetch(USERS_SESSIONS_SUMMARY, self.api.users_sessions_summary)
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Loading user directory failed: %s", exc)
            self.error = LOAD_ERROR
            return False
        self.error = None
        return True

    @property
    def users(self) -> list[UserWithSessionInfo]:
        return self.cache.peek(USERS_SESSIONS_SUMMARY) or []

    def filtered_users(self) -> list[UserWithSessionInfo]:
        return filter_users(self.users, self.search_term)

    def sessions_path(self, user_id: int) -> str:
        return sessions_path(user_id)
