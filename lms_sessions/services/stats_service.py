"""
Session statistics — global counts and breakdowns for the dashboard.

Always computed over the whole `user_sessions` table; the dashboard
never aggregates filtered subsets itself.
"""

from collections import Counter

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.models.session import SessionStatus, UserSession

UNKNOWN = "Unknown"


async def _count(db: AsyncSession, *criteria) -> int:
    stmt = select(func.count(UserSession.id))
    if criteria:
        stmt = stmt.where(*criteria)
    return (await db.execute(stmt)).scalar() or 0


async def _breakdown(db: AsyncSession, column) -> list[tuple[str, int]]:
    """Group by a nullable column; NULL lands in the "Unknown" bucket."""
    result = await db.execute(
        select(column, func.count(UserSession.id)).group_by(column)
    )
    counts: Counter[str] = Counter()
    for value, count in result.all():
        counts[value or UNKNOWN] += count
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def _device_type(is_mobile: bool | None) -> str:
    if is_mobile is None:
        return UNKNOWN
    return "Mobile" if is_mobile else "Desktop"


async def get_session_stats(db: AsyncSession) -> dict:
    total = await _count(db)
    active = await _count(db, UserSession.status == SessionStatus.ACTIVE)
    suspicious = await _count(db, UserSession.status == SessionStatus.SUSPICIOUS)
    distinct_users = (
        await db.execute(select(func.count(distinct(UserSession.user_id))))
    ).scalar() or 0

    locations = await _breakdown(db, UserSession.location)
    browsers = await _breakdown(db, UserSession.browser_name)
    systems = await _breakdown(db, UserSession.os_name)

    device_rows = await db.execute(
        select(UserSession.is_mobile, func.count(UserSession.id)).group_by(UserSession.is_mobile)
    )
    device_types: Counter[str] = Counter()
    for is_mobile, count in device_rows.all():
        device_types[_device_type(is_mobile)] += count

    return {
        "total_sessions": total,
        "active_sessions": active,
        "suspicious_sessions": suspicious,
        "distinct_users": distinct_users,
        "location_data": [{"location": k, "count": v} for k, v in locations],
        "browser_data": [{"browser": k, "count": v} for k, v in browsers],
        "os_data": [{"os": k, "count": v} for k, v in systems],
        "device_type_data": [
            {"type": k, "count": v}
            for k, v in sorted(device_types.items(), key=lambda kv: (-kv[1], kv[0]))
        ],
    }
