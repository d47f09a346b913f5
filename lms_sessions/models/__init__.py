"""
Models package — import every model so SQLAlchemy's Base.metadata
knows about all tables (critical for Alembic autogenerate).
"""

from lms_sessions.models.base import Base, CreatedAtMixin, IntegerPrimaryKeyMixin
from lms_sessions.models.session import SessionStatus, UserSession
from lms_sessions.models.user import User, UserRole

__all__ = [
    "Base",
    "CreatedAtMixin",
    "IntegerPrimaryKeyMixin",
    "SessionStatus",
    "User",
    "UserRole",
    "UserSession",
]
