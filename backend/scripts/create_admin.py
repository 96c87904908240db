"""Create the admin account, or reset its password.

Usage (from backend/ directory):
    python scripts/create_admin.py admin@example.com 'new-password'

Prerequisites:
    - DB is running and migrated (alembic upgrade head)
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Windows: asyncpg requires SelectorEventLoop
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Allow imports from backend/
sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_api.database import async_session_factory, engine
from portfolio_api.models.user import User, UserRole
from portfolio_api.services.auth_service import get_user_by_email, hash_password


async def upsert_admin(email: str, password: str) -> None:
    async with async_session_factory() as session:
        user = await get_user_by_email(session, email)
        if user is None:
            session.add(User(email=email, password_hash=hash_password(password), role=UserRole.ADMIN))
            print(f"Created admin {email}")
        else:
            user.password_hash = hash_password(password)
            user.role = UserRole.ADMIN
            print(f"Reset password for {email}")
        await session.commit()
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args()
    if len(args.password) < 8:
        parser.error("password must be at least 8 characters")
    asyncio.run(upsert_admin(args.email, args.password))
