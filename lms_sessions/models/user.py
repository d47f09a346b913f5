from __future__ import annotations

"""
User model.

Only the identity fields the session administration screens need:
name, email and a single role.  Course, enrollment and payment data
belong to other parts of the LMS and are not mapped here.
"""

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms_sessions.models.base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin

if TYPE_CHECKING:
    from lms_sessions.models.session import UserSession


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class User(Base, IntegerPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(256), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.STUDENT,
        nullable=False,
    )

    # ── Relationships ────────────────────────────────────────────────
    sessions: Mapped[list["UserSession"]] = relationship(  # noqa: F821
        back_populates="user",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
