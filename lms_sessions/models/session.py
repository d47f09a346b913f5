"""
User session model — login session registry.

One row per login, kept for the audit trail:
- Status lifecycle (active / inactive / suspicious / revoked)
- Device & browser fingerprint parsed from the User-Agent
- IP and geolocation metadata for the admin dashboards
- Revocation reason, populated only once the row is revoked

Rows are never deleted by the API; "delete" means revoke.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms_sessions.models.base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin, utcnow

if TYPE_CHECKING:
    from lms_sessions.models.user import User


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    REVOKED = "revoked"
    SUSPICIOUS = "suspicious"


class UserSession(Base, IntegerPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "user_sessions"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, name="session_status", values_callable=lambda e: [m.value for m in e]),
        default=SessionStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    last_activity: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # ── Device ───────────────────────────────────────────────────────
    device_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    browser_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    browser_version: Mapped[str | None] = mapped_column(String(64), nullable=True)
    os_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    os_version: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_mobile: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # ── Location ─────────────────────────────────────────────────────
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    location: Mapped[str | None] = mapped_column(String(256), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    region_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    country_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    revocation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship(back_populates="sessions", lazy="joined")  # noqa: F821

    __table_args__ = (
        Index("ix_user_sessions_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<UserSession id={self.id} user={self.user_id} status={self.status.value}>"
