"""
Query cache shared by the admin views.

Each view is handed a cache instance; there is no module-level cache.
Entries are keyed by tuples mirroring the REST paths.  Invalidation
drops exactly the keys named, never a prefix and never the whole cache.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Hashable, Iterable

logger = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]
Loader = Callable[[], Awaitable[Any]]

# ── Keys ─────────────────────────────────────────────────────────────
ALL_SESSIONS: QueryKey = ("/api/admin/sessions",)
SUSPICIOUS_SESSIONS: QueryKey = ("/api/admin/sessions/suspicious",)
SESSION_STATS: QueryKey = ("/api/admin/sessions/stats",)
USERS_SESSIONS_SUMMARY: QueryKey = ("/api/admin/users/sessions-summary",)


def user_key(user_id: int) -> QueryKey:
    return ("/api/admin/users", user_id)


def user_sessions_key(user_id: int) -> QueryKey:
    return ("/api/admin/users", user_id, "sessions")


def session_dependent_keys(user_id: int | None = None) -> list[QueryKey]:
    """Everything a session status change can make stale."""
    keys = [ALL_SESSIONS, SUSPICIOUS_SESSIONS, SESSION_STATS]
    if user_id:
        keys.append(user_sessions_key(user_id))
    return keys


# ── Cache ────────────────────────────────────────────────────────────
class QueryStatus(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class QueryState:
    status: QueryStatus
    data: Any = None
    error: BaseException | None = None
    updated_at: datetime | None = None


class QueryCache:
    def __init__(self) -> None:
        self._states: dict[QueryKey, QueryState] = {}
        self._inflight: dict[QueryKey, asyncio.Future] = {}
        # Bumped on invalidate so a request started before it can't
        # repopulate the entry with pre-mutation data.
        self._generation: dict[QueryKey, int] = {}

    def get_state(self, key: QueryKey) -> QueryState | None:
        return self._states.get(key)

    def peek(self, key: QueryKey) -> Any:
        state = self._states.get(key)
        return state.data if state and state.status == QueryStatus.SUCCESS else None

    async def fetch(self, key: QueryKey, loader: Loader) -> Any:
        """
        Return cached data for `key`, loading it once if needed.

        Concurrent callers share a single in-flight request.  A failed
        load is recorded and re-raised; the next fetch tries again.
        """
        state = self._states.get(key)
        if state is not None and state.status == QueryStatus.SUCCESS:
            return state.data

        future = self._inflight.get(key)
        if future is None:
            self._states[key] = QueryState(status=QueryStatus.LOADING)
            generation = self._generation.get(key, 0)
            future = asyncio.ensure_future(self._load(key, loader, generation))
            self._inflight[key] = future
        return await future

    async def _load(self, key: QueryKey, loader: Loader, generation: int) -> Any:
        try:
            data = await loader()
        except Exception as exc:
            if self._generation.get(key, 0) == generation:
                self._states[key] = QueryState(
                    status=QueryStatus.ERROR, error=exc, updated_at=datetime.now(timezone.utc)
                )
            raise
        else:
            if self._generation.get(key, 0) == generation:
                self._states[key] = QueryState(
                    status=QueryStatus.SUCCESS, data=data, updated_at=datetime.now(timezone.utc)
                )
            return data
        finally:
            if self._generation.get(key, 0) == generation:
                self._inflight.pop(key, None)

    def invalidate(self, key: QueryKey) -> bool:
        """Drop one entry.  Returns True if anything was cached or loading."""
        self._generation[key] = self._generation.get(key, 0) + 1
        had_state = self._states.pop(key, None) is not None
        had_inflight = self._inflight.pop(key, None) is not None
        if had_state or had_inflight:
            logger.debug("Invalidated query %s", key)
        return had_state or had_inflight

    def invalidate_many(self, keys: Iterable[QueryKey]) -> list[QueryKey]:
        return [key for key in keys if self.invalidate(key)]

    def set(self, key: QueryKey, data: Any) -> None:
        self._states[key] = QueryState(
            status=QueryStatus.SUCCESS, data=data, updated_at=datetime.now(timezone.utc)
        )
