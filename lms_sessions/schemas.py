"""
Pydantic schemas for request / response serialization.

Response schemas are separate from the SQLAlchemy models; services
return ORM rows or dicts and controllers validate them into these.

The admin dashboard speaks camelCase JSON; every schema accepts both
the camelCase alias and the Python field name on input.
"""

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from lms_sessions.models.session import SessionStatus


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


# ── Auth ─────────────────────────────────────────────────────────────
class LoginRequest(CamelModel):
    email: str
    password: str = Field(min_length=1)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str
    session_id: int
    suspicious: bool = False
    reason: str | None = None


# ── User ─────────────────────────────────────────────────────────────
class UserOut(CamelModel):
    id: int
    name: str
    email: str
    role: str


class UserWithSessionInfo(CamelModel):
    id: int
    name: str
    email: str
    role: str
    active_sessions: int = 0
    suspicious_sessions: int = 0
    last_activity: datetime | None = None
    last_location: str | None = None
    last_ip: str | None = None
    last_device: str | None = None


# ── Sessions ─────────────────────────────────────────────────────────
class UserSessionOut(CamelModel):
    id: int
    user_id: int
    session_id: str
    status: SessionStatus
    created_at: datetime
    last_activity: datetime
    expires_at: datetime | None = None
    device_info: str | None = None
    browser_name: str | None = None
    browser_version: str | None = None
    os_name: str | None = None
    os_version: str | None = None
    is_mobile: bool | None = None
    ip_address: str | None = None
    location: str | None = None
    city: str | None = None
    region_name: str | None = None
    country_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    revocation_reason: str | None = None
    user_name: str | None = None
    user_email: str | None = None


class OwnSessionOut(CamelModel):
    """Reduced view a user gets of their own sessions."""

    id: int
    created_at: datetime
    last_activity: datetime
    device_info: str | None = None
    location: str | None = None
    is_mobile: bool | None = None
    browser_name: str | None = None
    os_name: str | None = None
    is_current_session: bool = False


class RevokeSessionRequest(CamelModel):
    reason: str | None = None


# ── Statistics ───────────────────────────────────────────────────────
class LocationCount(CamelModel):
    location: str
    count: int


class BrowserCount(CamelModel):
    browser: str
    count: int


class OsCount(CamelModel):
    os: str
    count: int


class DeviceTypeCount(CamelModel):
    type: str
    count: int


class SessionStats(CamelModel):
    total_sessions: int = 0
    active_sessions: int = 0
    suspicious_sessions: int = 0
    distinct_users: int = 0
    location_data: list[LocationCount] = []
    browser_data: list[BrowserCount] = []
    os_data: list[OsCount] = []
    device_type_data: list[DeviceTypeCount] = []


# ── Generic ──────────────────────────────────────────────────────────
class MessageResponse(CamelModel):
    success: bool = True
    message: str


class RevokeAllResponse(MessageResponse):
    revoked_count: int = 0
