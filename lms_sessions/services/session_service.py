"""
Session service — queries & lifecycle transitions for user sessions.

Handles:
- Listing sessions (all, suspicious-only, per user)
- Revoking a single session or every session of a user
- Flagging a session as suspicious
- Logout (active / suspicious → inactive)

Every status change goes through `check_transition` so the lifecycle
rules live in one place.  Rows are only ever updated, never deleted.
"""

import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.core.config import settings
from lms_sessions.models.session import SessionStatus, UserSession
from lms_sessions.services.session_transitions import check_transition

logger = logging.getLogger(__name__)


def _newest_first(stmt):
    return stmt.order_by(UserSession.last_activity.desc(), UserSession.id.desc())


async def list_sessions(db: AsyncSession) -> list[UserSession]:
    """Return every session, most recent activity first."""
    result = await db.execute(_newest_first(select(UserSession)))
    return list(result.scalars().all())


async def list_suspicious_sessions(db: AsyncSession) -> list[UserSession]:
    stmt = select(UserSession).where(UserSession.status == SessionStatus.SUSPICIOUS)
    result = await db.execute(_newest_first(stmt))
    return list(result.scalars().all())


async def list_user_sessions(user_id: int, db: AsyncSession) -> list[UserSession]:
    stmt = select(UserSession).where(UserSession.user_id == user_id)
    result = await db.execute(_newest_first(stmt))
    return list(result.scalars().all())


async def list_live_user_sessions(user_id: int, db: AsyncSession) -> list[UserSession]:
    """Sessions that still authenticate (active or suspicious)."""
    stmt = select(UserSession).where(
        UserSession.user_id == user_id,
        UserSession.status.in_([SessionStatus.ACTIVE, SessionStatus.SUSPICIOUS]),
    )
    result = await db.execute(_newest_first(stmt))
    return list(result.scalars().all())


async def get_session(session_pk: int, db: AsyncSession) -> UserSession:
    session = await db.get(UserSession, session_pk)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


async def get_session_by_token_id(session_id: str, db: AsyncSession) -> UserSession | None:
    stmt = select(UserSession).where(UserSession.session_id == session_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def revoke_session(
    session_pk: int,
    db: AsyncSession,
    reason: str | None = None,
) -> UserSession:
    """
    Revoke one session.

    A blank or missing reason falls back to DEFAULT_REVOCATION_REASON so
    a revoked row always carries one.
    """
    session = await get_session(session_pk, db)
    check_transition(session.status, SessionStatus.REVOKED)

    session.status = SessionStatus.REVOKED
    session.revocation_reason = (reason or "").strip() or settings.DEFAULT_REVOCATION_REASON
    await db.flush()
    logger.info("Session %s revoked (%s)", session.id, session.revocation_reason)
    return session


async def mark_session_suspicious(session_pk: int, db: AsyncSession) -> UserSession:
    session = await get_session(session_pk, db)
    if check_transition(session.status, SessionStatus.SUSPICIOUS):
        session.status = SessionStatus.SUSPICIOUS
        await db.flush()
        logger.info("Session %s marked suspicious", session.id)
    return session


async def revoke_all_user_sessions(
    user_id: int,
    db: AsyncSession,
    reason: str | None = None,
) -> int:
    """
    Revoke every non-revoked session of a user.

    Returns the number of sessions affected.  Raises 404 when the user
    has no session history at all.
    """
    sessions = await list_user_sessions(user_id, db)
    if not sessions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No sessions found for user",
        )

    revoked = 0
    for session in sessions:
        if session.status == SessionStatus.REVOKED:
            continue
        session.status = SessionStatus.REVOKED
        session.revocation_reason = reason or settings.REVOKE_ALL_REASON
        revoked += 1

    await db.flush()
    logger.info("Revoked %d session(s) for user %s", revoked, user_id)
    return revoked


async def deactivate_session(session_pk: int, db: AsyncSession) -> None:
    """Mark a single session as inactive (logout)."""
    session = await get_session(session_pk, db)
    if check_transition(session.status, SessionStatus.INACTIVE):
        session.status = SessionStatus.INACTIVE
        await db.flush()
