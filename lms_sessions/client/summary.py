"""
Summary cards for the per-user session page.

"Last" always means most recent by timestamp.  Sessions are sorted
before anything is picked; equal timestamps break toward the higher
session id.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Sequence

from lms_sessions.models.base import as_utc
from lms_sessions.models.session import SessionStatus
from lms_sessions.schemas import UserSessionOut

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _timestamp(session: UserSessionOut, field: str) -> datetime:
    return as_utc(getattr(session, field)) or _EPOCH


def sort_by_recency(
    sessions: Sequence[UserSessionOut],
    field: str = "last_activity",
) -> list[UserSessionOut]:
    """Newest first by `field`; ties broken by id, highest first."""
    return sorted(sessions, key=lambda s: (_timestamp(s, field), s.id), reverse=True)


def most_recent_with(
    sessions: Sequence[UserSessionOut],
    predicate: Callable[[UserSessionOut], bool],
    field: str = "last_activity",
) -> UserSessionOut | None:
    for session in sort_by_recency(sessions, field):
        if predicate(session):
            return session
    return None


def earliest(
    sessions: Sequence[UserSessionOut],
    field: str = "created_at",
) -> UserSessionOut | None:
    if not sessions:
        return None
    return min(sessions, key=lambda s: (_timestamp(s, field), s.id))


def location_label(session: UserSessionOut) -> str:
    """Format as City, Region, Country with placeholders for the missing parts."""
    parts = [session.city or "Unknown City"]
    if session.region_name:
        parts.append(session.region_name)
    parts.append(session.country_name or "Unknown Country")
    return ", ".join(parts)


@dataclass
class UserSessionSummary:
    total: int = 0
    active: int = 0
    suspicious: int = 0
    last_location: str | None = None
    last_ip: str | None = None
    coordinates: tuple[float, float] | None = None
    last_activity: datetime | None = None
    first_seen: datetime | None = None
    primary_device: str | None = None
    primary_device_is_mobile: bool | None = None


def summarize_sessions(sessions: Sequence[UserSessionOut]) -> UserSessionSummary:
    summary = UserSessionSummary(
        total=len(sessions),
        active=sum(1 for s in sessions if s.status == SessionStatus.ACTIVE),
        suspicious=sum(1 for s in sessions if s.status == SessionStatus.SUSPICIOUS),
    )
    if not sessions:
        return summary

    geo = most_recent_with(sessions, lambda s: bool(s.city or s.country_name))
    if geo is not None:
        summary.last_location = location_label(geo)
    else:
        named = most_recent_with(sessions, lambda s: bool(s.location))
        summary.last_location = named.location if named else None

    with_ip = most_recent_with(sessions, lambda s: bool(s.ip_address))
    summary.last_ip = with_ip.ip_address if with_ip else None

    with_coords = most_recent_with(
        sessions, lambda s: s.latitude is not None and s.longitude is not None
    )
    if with_coords is not None:
        summary.coordinates = (with_coords.latitude, with_coords.longitude)

    summary.last_activity = sort_by_recency(sessions)[0].last_activity
    first = earliest(sessions)
    summary.first_seen = first.created_at if first else None

    device = most_recent_with(sessions, lambda s: bool(s.device_info))
    if device is not None:
        summary.primary_device = device.device_info
        summary.primary_device_is_mobile = device.is_mobile

    return summary
