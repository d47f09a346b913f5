"""
In-memory narrowing of session and user lists.

Pure and synchronous: recomputed whenever the search box, status
filter or tab changes, and never triggers a request.
"""

from enum import Enum
from typing import Iterable, Sequence

from lms_sessions.models.session import SessionStatus
from lms_sessions.schemas import UserSessionOut, UserWithSessionInfo

STATUS_ALL = "all"

ADMIN_SEARCH_FIELDS = (
    "user_name",
    "user_email",
    "device_info",
    "location",
    "ip_address",
    "browser_name",
)

# The per-user page has no owner columns to search but shows geolocation.
USER_SEARCH_FIELDS = (
    "device_info",
    "location",
    "ip_address",
    "browser_name",
    "city",
    "country_name",
    "region_name",
)


class SessionTab(str, Enum):
    ALL = "all"
    SUSPICIOUS = "suspicious"
    USER = "user"


def matches_term(item: object, term: str, fields: Iterable[str]) -> bool:
    needle = term.lower()
    for field in fields:
        value = getattr(item, field, None)
        if value and needle in str(value).lower():
            return True
    return False


def filter_sessions(
    sessions: Sequence[UserSessionOut],
    term: str = "",
    status: str | SessionStatus = STATUS_ALL,
    fields: Iterable[str] = ADMIN_SEARCH_FIELDS,
) -> list[UserSessionOut]:
    """Case-insensitive text search intersected with an exact status match."""
    fields = tuple(fields)
    result = list(sessions)
    if term:
        result = [s for s in result if matches_term(s, term, fields)]
    if status != STATUS_ALL:
        wanted = SessionStatus(status)
        result = [s for s in result if s.status == wanted]
    return result


def select_tab_sessions(
    tab: SessionTab,
    *,
    all_sessions: Sequence[UserSessionOut],
    suspicious_sessions: Sequence[UserSessionOut],
    user_sessions: Sequence[UserSessionOut],
    selected_user_id: int | None,
) -> list[UserSessionOut]:
    match SessionTab(tab):
        case SessionTab.ALL:
            return list(all_sessions)
        case SessionTab.SUSPICIOUS:
            return list(suspicious_sessions)
        case SessionTab.USER:
            return list(user_sessions) if selected_user_id else []


def filter_users(users: Sequence[UserWithSessionInfo], term: str = "") -> list[UserWithSessionInfo]:
    if not term:
        return list(users)
    return [u for u in users if matches_term(u, term, ("name", "email", "role", "last_location"))]
