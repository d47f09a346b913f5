"""
Authentication service.

Handles:
- Login: credential check, session registration, suspicious-login
  detection, token issue
- Token payload construction (user id, role, session row id)

Every login creates a new `user_sessions` row; sessions are never
reused across logins so the admin dashboard sees the full history.

All business logic lives here — controllers call service methods
and return the result.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.core.config import settings
from lms_sessions.core.security import create_access_token, verify_password
from lms_sessions.models.session import SessionStatus, UserSession
from lms_sessions.models.user import User
from lms_sessions.services import suspicious_activity, user_service
from lms_sessions.services.device_parser import parse_user_agent

logger = logging.getLogger(__name__)


def _build_access_payload(user: User, session: UserSession) -> dict:
    return {
        "sub": str(user.id),
        "role": user.role.value,
        "session_id": str(session.id),
    }


async def register_session(
    user: User,
    db: AsyncSession,
    *,
    user_agent: str | None,
    ip_address: str | None,
    location: str | None = None,
) -> tuple[UserSession, suspicious_activity.SuspicionResult]:
    """Record a new login and flag it when it looks suspicious."""
    device = parse_user_agent(user_agent)
    now = datetime.now(timezone.utc)

    session = UserSession(
        user_id=user.id,
        session_id=secrets.token_urlsafe(32),
        status=SessionStatus.ACTIVE,
        last_activity=now,
        expires_at=now + timedelta(days=settings.SESSION_EXPIRE_DAYS),
        device_info=device.device_info,
        is_mobile=device.is_mobile,
        browser_name=device.browser_name,
        browser_version=device.browser_version,
        os_name=device.os_name,
        os_version=device.os_version,
        ip_address=ip_address,
        location=location,
    )
    db.add(session)
    await db.flush()

    verdict = await suspicious_activity.detect_suspicious_activity(
        user.id,
        session.session_id,
        db,
        location=location,
        device_info=device.device_info,
    )
    if verdict.is_suspicious:
        session.status = SessionStatus.SUSPICIOUS
        await db.flush()
        logger.warning("Suspicious login detected for user %s: %s", user.id, verdict.reason)

    return session, verdict


async def authenticate_user(
    email: str,
    password: str,
    db: AsyncSession,
    *,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> dict:
    """Validate credentials, register the session and return an access token."""
    user = await user_service.get_user_by_email(email, db)

    if user is None or not verify_password(password, user.password_hash or ""):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    session, verdict = await register_session(
        user, db, user_agent=user_agent, ip_address=ip_address,
    )

    return {
        "access_token": create_access_token(_build_access_payload(user, session)),
        "token_type": "bearer",
        "user_id": user.id,
        "role": user.role.value,
        "session_id": session.id,
        "suspicious": verdict.is_suspicious,
        "reason": verdict.reason,
    }
