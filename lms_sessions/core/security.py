"""
Password hashing, JWT helpers & per-request session checks.

- bcrypt is called directly (passlib is unmaintained and broken with
  bcrypt>=4.1).
- An access token names the user (`sub`), their role and the
  `user_sessions` row it was issued for (`session_id`).
- A valid signature is not enough: the session row must still be live,
  so revoking a session locks its holder out on the next request.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.core.config import settings
from lms_sessions.core.database import get_db
from lms_sessions.models.base import as_utc
from lms_sessions.models.session import SessionStatus, UserSession

LIVE_STATUSES = (SessionStatus.ACTIVE, SessionStatus.SUSPICIOUS)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ── Passwords ────────────────────────────────────────────────────────
def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


# ── Tokens ───────────────────────────────────────────────────────────
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def create_access_token(claims: dict[str, Any], ttl: timedelta | None = None) -> str:
    expires = datetime.now(timezone.utc) + (ttl or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode({**claims, "exp": expires}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry.  Raises 401 on any failure."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise _unauthorized("Invalid or expired token")


# ── Session registry check ───────────────────────────────────────────
async def get_current_user_token(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """
    FastAPI dependency returning the decoded token claims.

    The session row named by the token must:
      1. exist and belong to the token's user,
      2. be active or suspicious (revoked and logged-out rows fail),
      3. not be past its `expires_at`.

    Touches ``last_activity``; the request transaction commits it.
    """
    claims = decode_access_token(token)

    try:
        user_id = int(claims["sub"])
        session_pk = int(claims["session_id"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Invalid token payload — missing session fields")

    session = await db.get(UserSession, session_pk)
    if session is None or session.user_id != user_id or session.status not in LIVE_STATUSES:
        raise _unauthorized("Session expired or revoked")

    now = datetime.now(timezone.utc)
    expires_at = as_utc(session.expires_at)
    if expires_at is not None and expires_at <= now:
        raise _unauthorized("Session expired or revoked")

    session.last_activity = now
    return claims
