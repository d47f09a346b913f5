"""
Tests for the admin client views over a mocked transport.

Covers:
  - Parallel loading and the blocking error state
  - Revoke with blank reason sends the default reason
  - Cache invalidation after each mutation
  - Declined revoke-all issues no request
  - Revoke-all invalidates the revoked user's sessions even when unselected
  - Failure toasts leave cached data alone
  - Stat cards render zero as "0"
"""

import json

import httpx
import pytest

from lms_sessions.client.api import AdminApiClient, ApiError
from lms_sessions.client.filtering import SessionTab
from lms_sessions.client.notifications import ToastVariant
from lms_sessions.client.query_cache import (
    ALL_SESSIONS,
    SESSION_STATS,
    SUSPICIOUS_SESSIONS,
    QueryCache,
    user_key,
    user_sessions_key,
)
from lms_sessions.client.session_admin import SessionAdminView
from lms_sessions.client.user_directory import UserDirectoryView
from lms_sessions.client.user_sessions import UserSessionsView
from lms_sessions.models.session import SessionStatus
from tests.factories import session_json

STATS = {
    "totalSessions": 2,
    "activeSessions": 0,
    "suspiciousSessions": 1,
    "distinctUsers": 2,
    "locationData": [],
    "browserData": [],
    "osData": [],
    "deviceTypeData": [],
}


class FakeAdminServer:
    """In-memory stand-in for the admin API, driven through httpx.MockTransport."""

    def __init__(self):
        self.sessions = {
            1: session_json(1, user_id=7, user_name="Amina", browser_name="Chrome"),
            2: session_json(2, user_id=8, status=SessionStatus.SUSPICIOUS, user_name="Omar"),
        }
        self.requests: list[httpx.Request] = []
        self.fail_paths: set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path, method = request.url.path, request.method
        if path in self.fail_paths:
            return httpx.Response(500, json={"message": "Database unavailable"})

        if method == "GET" and path == "/api/admin/sessions":
            return httpx.Response(200, json=list(self.sessions.values()))
        if method == "GET" and path == "/api/admin/sessions/suspicious":
            rows = [s for s in self.sessions.values() if s["status"] == "suspicious"]
            return httpx.Response(200, json=rows)
        if method == "GET" and path == "/api/admin/sessions/stats":
            return httpx.Response(200, json=STATS)
        if method == "GET" and path == "/api/admin/users/7":
            return httpx.Response(200, json={"id": 7, "name": "Amina", "email": "a@x.io", "role": "student"})
        if method == "GET" and path == "/api/admin/users/7/sessions":
            return httpx.Response(200, json=[s for s in self.sessions.values() if s["userId"] == 7])
        if method == "GET" and path == "/api/admin/users/sessions-summary":
            return httpx.Response(
                200,
                json=[
                    {"id": 7, "name": "Amina", "email": "a@x.io", "role": "student", "activeSessions": 1},
                    {"id": 8, "name": "Omar", "email": "o@x.io", "role": "teacher", "suspiciousSessions": 1},
                ],
            )
        if method == "DELETE" and path.startswith("/api/admin/sessions/"):
            sid = int(path.rsplit("/", 1)[1])
            self.sessions[sid]["status"] = "revoked"
            self.sessions[sid]["revocationReason"] = json.loads(request.content)["reason"]
            return httpx.Response(200, json={"success": True, "message": "Session revoked successfully"})
        if method == "PUT" and path.endswith("/mark-suspicious"):
            sid = int(path.split("/")[-2])
            self.sessions[sid]["status"] = "suspicious"
            return httpx.Response(200, json={"success": True, "message": "Session marked as suspicious"})
        if method == "DELETE" and path == "/api/admin/users/7/sessions":
            for session in self.sessions.values():
                if session["userId"] == 7:
                    session["status"] = "revoked"
            return httpx.Response(200, json={"success": True, "message": "ok", "revokedCount": 1})
        return httpx.Response(404, json={"message": "Not found"})

    def mutations(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method != "GET"]


@pytest.fixture
def server() -> FakeAdminServer:
    return FakeAdminServer()


@pytest.fixture
async def api(server):
    http = httpx.AsyncClient(transport=httpx.MockTransport(server.handler), base_url="http://test")
    async with http:
        yield AdminApiClient(token="t0k3n", http=http)


class TestApiClient:
    async def test_bearer_header_is_sent(self, api, server):
        await api.list_sessions()
        assert server.requests[0].headers["Authorization"] == "Bearer t0k3n"

    async def test_error_carries_server_message(self, api, server):
        server.fail_paths.add("/api/admin/sessions")
        with pytest.raises(ApiError) as exc_info:
            await api.list_sessions()
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Database unavailable"


class TestSessionAdminLoad:
    async def test_load_populates_all_three_queries(self, api, server):
        view = SessionAdminView(api)
        assert await view.load() is True
        assert [s.id for s in view.all_sessions] == [1, 2]
        assert [s.id for s in view.suspicious_sessions] == [2]
        assert view.stats.active_sessions == 0
        assert view.error is None

    async def test_stat_cards_render_zero(self, api):
        view = SessionAdminView(api)
        await view.load()
        cards = view.stat_cards()
        assert cards["Active Sessions"] == "0"
        assert cards["Total Sessions"] == "2"

    async def test_any_failure_blocks_the_screen(self, api, server):
        server.fail_paths.add("/api/admin/sessions/stats")
        view = SessionAdminView(api)
        assert await view.load() is False
        assert view.error == "Failed to load session data. Please try again later."

    async def test_second_load_is_served_from_cache(self, api, server):
        view = SessionAdminView(api)
        await view.load()
        await view.load()
        assert len(server.requests) == 3

    async def test_user_tab_loads_selected_user(self, api, server):
        view = SessionAdminView(api)
        view.view_user_sessions(7)
        await view.load()
        assert view.active_tab == SessionTab.USER
        assert [s.id for s in view.visible_sessions()] == [1]

    async def test_visible_sessions_apply_search_and_status(self, api):
        view = SessionAdminView(api)
        await view.load()
        view.status_filter = "suspicious"
        assert [s.id for s in view.visible_sessions()] == [2]
        view.status_filter = "all"
        view.search_term = "chrome"
        assert [s.id for s in view.visible_sessions()] == [1]


class TestSessionAdminMutations:
    async def test_blank_reason_sends_default(self, api, server):
        view = SessionAdminView(api)
        assert await view.revoke(1, "") is True
        (request,) = server.mutations()
        assert request.method == "DELETE"
        assert json.loads(request.content) == {"reason": "Revoked by admin"}

    async def test_reason_is_trimmed_once(self, api, server):
        view = SessionAdminView(api)
        assert await view.revoke(1, "  Shared password  ") is True
        assert json.loads(server.mutations()[0].content) == {"reason": "Shared password"}

    async def test_revoke_dialog_flow(self, api, server):
        view = SessionAdminView(api)
        await view.load()
        view.begin_revoke(view.all_sessions[0])
        view.revoke_reason = "Shared password"
        assert await view.confirm_revoke() is True
        assert json.loads(server.mutations()[0].content) == {"reason": "Shared password"}
        assert view.selected_session is None
        assert view.notifier.last.title == "Session revoked successfully"

    async def test_revoke_invalidates_dependent_queries(self, api, server):
        view = SessionAdminView(api)
        view.view_user_sessions(7)
        await view.load()
        view.cache.set(user_key(7), "identity")

        await view.revoke(1, "")

        for key in (ALL_SESSIONS, SUSPICIOUS_SESSIONS, SESSION_STATS, user_sessions_key(7)):
            assert view.cache.get_state(key) is None
        assert view.cache.peek(user_key(7)) == "identity"

    async def test_reload_after_revoke_shows_new_status(self, api):
        view = SessionAdminView(api)
        await view.load()
        await view.revoke(1, "")
        await view.load()
        assert view.all_sessions[0].status == SessionStatus.REVOKED
        assert view.rows()[0].can_revoke is False

    async def test_mark_suspicious_then_reload_disables_mark(self, api):
        view = SessionAdminView(api)
        await view.load()
        assert view.rows()[0].can_mark_suspicious is True

        assert await view.mark_suspicious(1) is True
        await view.load()

        row = view.rows()[0]
        assert row.status == SessionStatus.SUSPICIOUS
        assert row.badge.color == "bg-yellow-500"
        assert row.can_mark_suspicious is False
        assert [s.id for s in view.suspicious_sessions] == [1, 2]

    async def test_declined_revoke_all_makes_no_request(self, api, server):
        view = SessionAdminView(api)
        prompts = []

        def decline(message):
            prompts.append(message)
            return False

        assert await view.revoke_all(7, decline) is False
        assert server.requests == []
        assert prompts == ["Are you sure you want to revoke all sessions for this user?"]

    async def test_accepted_revoke_all_with_async_confirm(self, api, server):
        view = SessionAdminView(api)

        async def accept(message):
            return True

        assert await view.revoke_all(7, accept) is True
        assert server.mutations()[0].url.path == "/api/admin/users/7/sessions"
        assert view.notifier.last.title == "All sessions revoked"

    async def test_revoke_all_invalidates_that_users_sessions(self, api, server):
        cache = QueryCache()
        user_view = UserSessionsView(api, 7, cache=cache)
        await user_view.load()
        admin = SessionAdminView(api, cache=cache)
        assert admin.selected_user_id is None

        assert await admin.revoke_all(7, lambda message: True) is True

        assert cache.get_state(user_sessions_key(7)) is None
        await user_view.load()
        assert [s.status for s in user_view.sessions] == [SessionStatus.REVOKED]
        assert user_view.can_revoke_all is False

    async def test_failure_toast_keeps_cache(self, api, server):
        view = SessionAdminView(api)
        await view.load()
        server.fail_paths.add("/api/admin/sessions/1/mark-suspicious")

        assert await view.mark_suspicious(1) is False
        toast = view.notifier.last
        assert toast.variant == ToastVariant.DESTRUCTIVE
        assert toast.title == "Failed to mark session"
        assert view.cache.peek(ALL_SESSIONS) is not None

    async def test_failed_revoke_keeps_dialog_open(self, api, server):
        view = SessionAdminView(api)
        await view.load()
        server.fail_paths.add("/api/admin/sessions/1")
        view.begin_revoke(view.all_sessions[0])
        assert await view.confirm_revoke() is False
        assert view.selected_session is not None
        assert view.notifier.last.description == "An error occurred while revoking the session."


class TestUserSessionsView:
    async def test_requires_user_id(self, api):
        with pytest.raises(ValueError):
            UserSessionsView(api, 0)

    async def test_load_user_and_sessions(self, api, server):
        view = UserSessionsView(api, 7)
        assert await view.load() is True
        assert view.user.name == "Amina"
        assert [s.id for s in view.sessions] == [1]
        assert view.summary().active == 1
        assert view.can_revoke_all is True

    async def test_load_failure(self, api, server):
        server.fail_paths.add("/api/admin/users/7")
        view = UserSessionsView(api, 7)
        assert await view.load() is False
        assert view.error == "Failed to load user sessions data. Please try again later."

    async def test_mutation_invalidates_user_sessions(self, api, server):
        cache = QueryCache()
        view = UserSessionsView(api, 7, cache=cache)
        await view.load()
        cache.set(ALL_SESSIONS, [])

        await view.mark_suspicious(1)

        assert cache.get_state(user_sessions_key(7)) is None
        assert cache.get_state(ALL_SESSIONS) is None
        assert cache.peek(user_key(7)) is not None

    async def test_revoke_all_disabled_when_everything_revoked(self, api, server):
        server.sessions[1]["status"] = "revoked"
        view = UserSessionsView(api, 7)
        await view.load()
        assert view.can_revoke_all is False
        assert await view.revoke_all(lambda message: True) is False
        assert server.mutations() == []


class TestUserDirectoryView:
    async def test_load_and_search(self, api):
        view = UserDirectoryView(api)
        assert await view.load() is True
        view.search_term = "teacher"
        assert [u.id for u in view.filtered_users()] == [8]
        assert view.sessions_path(8) == "/admin/users/8/sessions"
