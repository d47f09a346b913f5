"""
Admin controller — session administration & user session reports.

Every route uses `Depends(require_admin)` for enforcement.
Controllers are THIN — they delegate to services and return schemas.

Route order matters: the literal paths (`/sessions/suspicious`,
`/sessions/stats`, `/users/sessions-summary`) are declared before the
parameterised ones they would otherwise collide with.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.core.database import get_db
from lms_sessions.models.session import UserSession
from lms_sessions.models.user import User
from lms_sessions.rbac.dependencies import require_admin
from lms_sessions.schemas import (
    MessageResponse,
    RevokeAllResponse,
    RevokeSessionRequest,
    SessionStats,
    UserOut,
    UserSessionOut,
    UserWithSessionInfo,
)
from lms_sessions.services import session_service, stats_service, user_service

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def _session_out(session: UserSession) -> UserSessionOut:
    out = UserSessionOut.model_validate(session)
    owner = session.user
    out.user_name = owner.name if owner else "Unknown"
    out.user_email = owner.email if owner else "Unknown"
    return out


# ── Sessions ─────────────────────────────────────────────────────────
@router.get("/sessions", response_model=list[UserSessionOut])
async def list_sessions(
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    sessions = await session_service.list_sessions(db)
    return [_session_out(s) for s in sessions]


@router.get("/sessions/suspicious", response_model=list[UserSessionOut])
async def list_suspicious_sessions(
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    sessions = await session_service.list_suspicious_sessions(db)
    return [_session_out(s) for s in sessions]


@router.get("/sessions/stats", response_model=SessionStats)
async def session_stats(
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Global counts & breakdowns — independent of any dashboard filter."""
    return SessionStats.model_validate(await stats_service.get_session_stats(db))


@router.delete("/sessions/{session_id}", response_model=MessageResponse)
async def revoke_session(
    session_id: int,
    body: RevokeSessionRequest | None = None,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Revoke one session.  The row is kept; only its status changes."""
    await session_service.revoke_session(session_id, db, reason=body.reason if body else None)
    return MessageResponse(message="Session revoked successfully")


@router.put("/sessions/{session_id}/mark-suspicious", response_model=MessageResponse)
async def mark_session_suspicious(
    session_id: int,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await session_service.mark_session_suspicious(session_id, db)
    return MessageResponse(message="Session marked as suspicious")


# ── Users ────────────────────────────────────────────────────────────
@router.get("/users/sessions-summary", response_model=list[UserWithSessionInfo])
async def users_sessions_summary(
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await user_service.users_sessions_summary(db)
    return [UserWithSessionInfo.model_validate(r) for r in rows]


@router.get("/users/{user_id}", response_model=UserOut)
async def get_user(
    user_id: int,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    target = await user_service.get_user_by_id(user_id, db)
    return UserOut(id=target.id, name=target.name, email=target.email, role=target.role.value)


@router.get("/users/{user_id}/sessions", response_model=list[UserSessionOut])
async def list_user_sessions(
    user_id: int,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await user_service.get_user_by_id(user_id, db)
    sessions = await session_service.list_user_sessions(user_id, db)
    return [_session_out(s) for s in sessions]


@router.delete("/users/{user_id}/sessions", response_model=RevokeAllResponse)
async def revoke_all_user_sessions(
    user_id: int,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Revoke every session the user still holds."""
    count = await session_service.revoke_all_user_sessions(user_id, db)
    return RevokeAllResponse(message="All sessions revoked successfully", revoked_count=count)
