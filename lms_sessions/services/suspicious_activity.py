"""
Suspicious-login heuristics.

Evaluated once per login, comparing the new session with the user's
previous ones.  The first matching rule wins:

1. Impossible travel — location changed faster than IMPOSSIBLE_TRAVEL_HOURS.
2. Rapid device switch — device changed within RAPID_DEVICE_SWITCH_MINUTES.
3. Too many distinct devices across the five most recent sessions.
4. Unusual browser *and* OS variety.
5. Too many concurrent live sessions.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from lms_sessions.core.config import settings
from lms_sessions.models.base import as_utc
from lms_sessions.models.session import SessionStatus, UserSession
from lms_sessions.services import session_service

RECENT_WINDOW = 5


@dataclass
class SuspicionResult:
    is_suspicious: bool
    reason: str | None = None


def evaluate(
    previous: list[UserSession],
    *,
    location: str | None,
    device_info: str | None,
    now: datetime | None = None,
) -> SuspicionResult:
    """
    Pure rule evaluation.

    `previous` must already exclude the session being evaluated and be
    ordered most recent activity first.
    """
    if not previous:
        return SuspicionResult(False)

    now = now or datetime.now(timezone.utc)
    latest = previous[0]
    last_seen = as_utc(latest.last_activity)

    if location and latest.location and location != latest.location and last_seen:
        hours = (now - last_seen).total_seconds() / 3600
        if hours < settings.IMPOSSIBLE_TRAVEL_HOURS:
            return SuspicionResult(
                True,
                f"Rapid location change: {latest.location} to {location} in {hours:.1f} hours",
            )

    if device_info and latest.device_info and device_info != latest.device_info and last_seen:
        minutes = (now - last_seen).total_seconds() / 60
        if minutes < settings.RAPID_DEVICE_SWITCH_MINUTES:
            return SuspicionResult(True, f"Rapid device change in {minutes:.1f} minutes")

    devices: set[str] = {device_info} if device_info else set()
    browsers: set[str] = set()
    systems: set[str] = set()
    for s in previous[:RECENT_WINDOW]:
        if s.device_info:
            devices.add(s.device_info)
        if s.browser_name:
            browsers.add(s.browser_name)
        if s.os_name:
            systems.add(s.os_name)

    if len(devices) > settings.MAX_DISTINCT_DEVICES:
        return SuspicionResult(True, f"Multiple different devices used ({len(devices)} devices)")

    if len(browsers) > 2 and len(systems) > 2:
        return SuspicionResult(True, "Unusual variety of browsers and operating systems")

    concurrent = [s for s in previous if s.status == SessionStatus.ACTIVE]
    if len(concurrent) >= settings.MAX_CONCURRENT_SESSIONS:
        return SuspicionResult(
            True,
            f"Too many concurrent active sessions ({len(concurrent) + 1} including current)",
        )

    return SuspicionResult(False)


async def detect_suspicious_activity(
    user_id: int,
    current_session_id: str,
    db: AsyncSession,
    *,
    location: str | None,
    device_info: str | None,
) -> SuspicionResult:
    sessions = await session_service.list_user_sessions(user_id, db)
    previous = [s for s in sessions if s.session_id != current_session_id]
    return evaluate(previous, location=location, device_info=device_info)
