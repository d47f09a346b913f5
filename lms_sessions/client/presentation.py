"""
Display helpers for session tables and stat cards.

`status_style` matches every SessionStatus explicitly and ends in
`assert_never`, so an unstyled status raises instead of falling through.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import assert_never

from lms_sessions.models.base import as_utc
from lms_sessions.models.session import SessionStatus
from lms_sessions.schemas import UserSessionOut
from lms_sessions.services.session_transitions import can_mark_suspicious, can_revoke


@dataclass(frozen=True)
class StatusStyle:
    color: str
    icon: str
    label: str


def status_style(status: SessionStatus) -> StatusStyle:
    match status:
        case SessionStatus.ACTIVE:
            return StatusStyle("bg-green-500", "Shield", "Active")
        case SessionStatus.INACTIVE:
            return StatusStyle("bg-gray-500", "Clock", "Inactive")
        case SessionStatus.REVOKED:
            return StatusStyle("bg-red-500", "Trash2", "Revoked")
        case SessionStatus.SUSPICIOUS:
            return StatusStyle("bg-yellow-500", "ShieldAlert", "Suspicious")
        case _:
            assert_never(status)


def format_count(value: int | None) -> str:
    """Stat cards show 0 as "0"; only a missing value gets a dash."""
    return "—" if value is None else str(value)


def format_elapsed(value: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    seconds = int((as_utc(now) - as_utc(value)).total_seconds())
    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


def format_date(value: datetime) -> str:
    """e.g. "Jan 5, 2026, 02:30 PM"."""
    return f"{value:%b} {value.day}, {value:%Y, %I:%M %p}"


def truncate_session_id(session_id: str, length: int = 8) -> str:
    return session_id if len(session_id) <= length else f"{session_id[:length]}..."


def device_icon(session: UserSessionOut) -> str:
    return "Smartphone" if session.is_mobile else "Laptop"


@dataclass(frozen=True)
class SessionRow:
    """One rendered table row."""

    id: int
    user: str
    device: str
    device_icon: str
    location: str
    ip_address: str
    status: SessionStatus
    badge: StatusStyle
    last_activity: str
    session_id: str
    can_mark_suspicious: bool
    can_revoke: bool


def render_row(session: UserSessionOut, now: datetime | None = None) -> SessionRow:
    return SessionRow(
        id=session.id,
        user=session.user_name or "Unknown",
        device=session.device_info or "Unknown Device",
        device_icon=device_icon(session),
        location=session.location or "Unknown",
        ip_address=session.ip_address or "Unknown",
        status=session.status,
        badge=status_style(session.status),
        last_activity=format_elapsed(session.last_activity, now),
        session_id=truncate_session_id(session.session_id),
        can_mark_suspicious=can_mark_suspicious(session.status),
        can_revoke=can_revoke(session.status),
    )
