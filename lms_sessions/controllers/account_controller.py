"""
Account controller — a user's view of their own sessions.

Users see a reduced field set (no session tokens, no revocation
details) and may revoke any of their sessions except the one making
the request; that one ends through logout.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.core.config import settings
from lms_sessions.core.database import get_db
from lms_sessions.core.security import get_current_user_token
from lms_sessions.models.user import User
from lms_sessions.rbac.dependencies import require_authenticated
from lms_sessions.schemas import MessageResponse, OwnSessionOut
from lms_sessions.services import session_service

router = APIRouter(prefix="/api/user", tags=["Account"])


@router.get("/sessions", response_model=list[OwnSessionOut])
async def my_sessions(
    user: User = Depends(require_authenticated),
    token_payload: dict[str, Any] = Depends(get_current_user_token),
    db: AsyncSession = Depends(get_db),
):
    current = int(token_payload["session_id"])
    sessions = await session_service.list_live_user_sessions(user.id, db)
    out = []
    for s in sessions:
        row = OwnSessionOut.model_validate(s)
        row.is_current_session = s.id == current
        out.append(row)
    return out


@router.delete("/sessions/{session_id}", response_model=MessageResponse)
async def revoke_my_session(
    session_id: int,
    user: User = Depends(require_authenticated),
    token_payload: dict[str, Any] = Depends(get_current_user_token),
    db: AsyncSession = Depends(get_db),
):
    session = await session_service.get_session(session_id, db)
    if session.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only revoke your own sessions",
        )
    if session.id == int(token_payload["session_id"]):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot revoke your current session. Use logout instead.",
        )

    await session_service.revoke_session(session_id, db, reason=settings.USER_REVOCATION_REASON)
    return MessageResponse(message="Session revoked successfully")
