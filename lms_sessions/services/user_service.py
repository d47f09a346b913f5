"""
User service — lookups & the per-user session summary.

The summary rows are a read model: they are rebuilt from the
`user_sessions` table on every call and never stored.
"""

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.models.session import SessionStatus, UserSession
from lms_sessions.models.user import User


async def get_user_by_id(user_id: int, db: AsyncSession) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def get_user_by_email(email: str, db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def users_sessions_summary(db: AsyncSession) -> list[dict]:
    """
    One row per user with session counts and the details of their most
    recently active session.

    Users without any session are included with zero counts.
    """
    users = list((await db.execute(select(User).order_by(User.id))).scalars().all())
    sessions = (
        await db.execute(
            select(UserSession).order_by(
                UserSession.last_activity.desc(), UserSession.id.desc()
            )
        )
    ).scalars().all()

    by_user: dict[int, list[UserSession]] = {}
    for s in sessions:
        by_user.setdefault(s.user_id, []).append(s)

    rows = []
    for user in users:
        owned = by_user.get(user.id, [])
        latest = owned[0] if owned else None
        rows.append(
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role.value,
                "active_sessions": sum(1 for s in owned if s.status == SessionStatus.ACTIVE),
                "suspicious_sessions": sum(
                    1 for s in owned if s.status == SessionStatus.SUSPICIOUS
                ),
                "last_activity": latest.last_activity if latest else None,
                "last_location": latest.location if latest else None,
                "last_ip": latest.ip_address if latest else None,
                "last_device": latest.device_info if latest else None,
            }
        )
    return rows
