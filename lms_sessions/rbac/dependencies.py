"""
RBAC dependencies — role enforcement for the admin & self-service APIs.

`require_role` is a *dependency factory*:  call it with one or more
role names and it returns a FastAPI dependency that will:

1. Decode the JWT and validate the session (via `get_current_user_token`).
2. Load the User row.
3. Verify the user's role is one of the allowed roles.
4. Return 403 on failure.

Usage in a route:
    @router.get("/sessions")
    async def list_sessions(user: User = Depends(require_role("admin"))): ...

`require_role()` with no arguments admits any authenticated user.
"""

import logging
from typing import Any

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.core.database import get_db
from lms_sessions.core.security import get_current_user_token
from lms_sessions.models.user import User, UserRole

logger = logging.getLogger("rbac")


class require_role:
    """
    Dependency factory.

    Can be used as:
        Depends(require_role("admin"))
        Depends(require_role("admin", "teacher"))
    """

    def __init__(self, *roles: str | UserRole):
        self.allowed = {UserRole(r) for r in roles}

    async def __call__(
        self,
        token_payload: dict[str, Any] = Depends(get_current_user_token),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        user = await db.get(User, int(token_payload["sub"]))
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

        if self.allowed and user.role not in self.allowed:
            logger.warning(
                "Role denied: user=%s role=%s required=%s",
                user.id,
                user.role.value,
                sorted(r.value for r in self.allowed),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only admins can access this endpoint"
                if self.allowed == {UserRole.ADMIN}
                else "Insufficient permissions",
            )

        return user


require_admin = require_role(UserRole.ADMIN)
require_authenticated = require_role()
