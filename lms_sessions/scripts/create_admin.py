"""
One-time bootstrap script — creates the first admin user.

Usage:
    python -m lms_sessions.scripts.create_admin

Run `alembic upgrade head` first.  Teachers and students come from the
rest of the LMS; this only gives the session dashboard someone to log
in as.
"""

import asyncio
import getpass

from lms_sessions.core.database import async_session_factory, engine
from lms_sessions.core.security import hash_password
from lms_sessions.models.user import User, UserRole
from lms_sessions.services.user_service import get_user_by_email


def _prompt() -> tuple[str, str, str] | None:
    print("\n🔧  LMS Session Admin — First Admin Setup\n")
    email = input("  Admin email: ").strip()
    name = input("  Full name:   ").strip()
    password = getpass.getpass("  Password:    ")

    if password != getpass.getpass("  Confirm:     "):
        print("\n❌  Passwords do not match.")
        return None
    if not (email and name and password):
        print("\n❌  All fields are required.")
        return None
    return email, name, password


async def create_admin() -> User | None:
    answers = _prompt()
    if answers is None:
        return None
    email, name, password = answers

    async with async_session_factory() as db:
        if await get_user_by_email(email, db) is not None:
            print(f"\n❌  User with email '{email}' already exists.")
            return None

        admin = User(email=email, name=name, password_hash=hash_password(password), role=UserRole.ADMIN)
        db.add(admin)
        await db.commit()

    print(f"\n✅  Admin #{admin.id} <{admin.email}> created.")
    print("   Log in via POST /api/auth/login\n")
    return admin


async def main() -> None:
    try:
        await create_admin()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
