"""Tests for login, logout and the self-service session endpoints."""

from sqlalchemy import select

from lms_sessions.models.session import SessionStatus, UserSession
from tests.factories import (
    ADMIN_PASSWORD,
    FIREFOX_LINUX,
    STUDENT_PASSWORD,
    bearer,
    create_session,
    create_user,
    login,
)


async def test_health_check_is_public(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestLogin:
    async def test_login_registers_a_session(self, client, db, student_user):
        data = await login(client, student_user.email, STUDENT_PASSWORD, user_agent=FIREFOX_LINUX)
        assert data["tokenType"] == "bearer"
        assert data["userId"] == student_user.id
        assert data["role"] == "student"
        assert data["suspicious"] is False

        session = (
            await db.execute(select(UserSession).where(UserSession.id == data["sessionId"]))
        ).scalar_one()
        assert session.status == SessionStatus.ACTIVE
        assert session.browser_name == "Firefox"
        assert session.os_name == "Linux"
        assert session.ip_address == "127.0.0.1"

    async def test_forwarded_for_header_sets_ip(self, client, db, student_user):
        response = await client.post(
            "/api/auth/login",
            json={"email": student_user.email, "password": STUDENT_PASSWORD},
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
        )
        session = await db.get(UserSession, response.json()["sessionId"])
        assert session.ip_address == "203.0.113.9"

    async def test_wrong_password(self, client, student_user):
        response = await client.post(
            "/api/auth/login", json={"email": student_user.email, "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Incorrect email or password"}

    async def test_unknown_email(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
        )
        assert response.status_code == 401

    async def test_me(self, client, admin_headers):
        response = await client.get("/api/auth/me", headers=admin_headers)
        assert response.json()["email"] == "admin@example.com"
        assert response.json()["role"] == "admin"


class TestLogout:
    async def test_logout_deactivates_session(self, client, db, admin_login, admin_headers):
        response = await client.delete("/api/auth/logout", headers=admin_headers)
        assert response.status_code == 200

        session = await db.get(UserSession, admin_login["sessionId"])
        assert session.status == SessionStatus.INACTIVE

        again = await client.get("/api/auth/me", headers=admin_headers)
        assert again.status_code == 401

    async def test_bad_token(self, client):
        response = await client.get("/api/auth/me", headers=bearer("not-a-jwt"))
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid or expired token"}


class TestOwnSessions:
    async def test_lists_live_sessions_with_current_marker(self, client, db, student_user):
        data = await login(client, student_user.email, STUDENT_PASSWORD)
        other = await create_session(db, student_user, device_info="Old laptop")
        await create_session(db, student_user, status=SessionStatus.REVOKED)

        response = await client.get("/api/user/sessions", headers=bearer(data["accessToken"]))
        rows = {r["id"]: r for r in response.json()}
        assert set(rows) == {data["sessionId"], other.id}
        assert rows[data["sessionId"]]["isCurrentSession"] is True
        assert rows[other.id]["isCurrentSession"] is False
        assert "sessionId" not in rows[other.id]

    async def test_revoke_own_other_session(self, client, db, student_user):
        data = await login(client, student_user.email, STUDENT_PASSWORD)
        other = await create_session(db, student_user)

        response = await client.delete(f"/api/user/sessions/{other.id}", headers=bearer(data["accessToken"]))
        assert response.status_code == 200
        await db.refresh(other)
        assert other.status == SessionStatus.REVOKED
        assert other.revocation_reason == "Revoked by user"

    async def test_cannot_revoke_current_session(self, client, student_user):
        data = await login(client, student_user.email, STUDENT_PASSWORD)
        response = await client.delete(
            f"/api/user/sessions/{data['sessionId']}", headers=bearer(data["accessToken"])
        )
        assert response.status_code == 400

    async def test_cannot_revoke_someone_elses_session(self, client, db, student_user):
        data = await login(client, student_user.email, STUDENT_PASSWORD)
        omar = await create_user(db, name="Omar Haddad", email="omar@example.com")
        theirs = await create_session(db, omar)

        response = await client.delete(f"/api/user/sessions/{theirs.id}", headers=bearer(data["accessToken"]))
        assert response.status_code == 403

    async def test_admin_can_use_self_service_too(self, client, admin_user):
        data = await login(client, admin_user.email, ADMIN_PASSWORD)
        response = await client.get("/api/user/sessions", headers=bearer(data["accessToken"]))
        assert response.status_code == 200
        assert len(response.json()) == 1
