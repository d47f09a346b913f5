"""
Auth controller — login, logout & current identity.

Login is PUBLIC (no role dependency).  Logout and /me require a live
session.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.core.database import get_db
from lms_sessions.core.security import get_current_user_token
from lms_sessions.models.user import User
from lms_sessions.rbac.dependencies import require_authenticated
from lms_sessions.schemas import LoginRequest, MessageResponse, TokenResponse, UserOut
from lms_sessions.services import auth_service, session_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def client_ip(request: Request) -> str | None:
    """First hop of X-Forwarded-For when behind a proxy, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    """Authenticate with email + password → receive a JWT bound to a new session."""
    return await auth_service.authenticate_user(
        body.email,
        body.password,
        db,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip(request),
    )


@router.delete("/logout", response_model=MessageResponse)
async def logout(
    token_payload: dict[str, Any] = Depends(get_current_user_token),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate the current session (server-side logout)."""
    await session_service.deactivate_session(int(token_payload["session_id"]), db)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(require_authenticated)):
    return UserOut(id=user.id, name=user.name, email=user.email, role=user.role.value)
