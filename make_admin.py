#!/usr/bin/env python3
"""
Script to make a user an admin.
Usage: python make_admin.py user@example.com
"""

import asyncio
import sys

from sqlalchemy import update

from app.core.config import get_settings
from app.db.database import Database
from app.domain.enums import UserRole
from app.infrastructure.orm.user_model import UserModel


async def make_user_admin(email: str) -> bool:
    """Make a user an admin by email."""
    database = Database(get_settings())
    try:
        async with database.session_factory() as session:
            result = await session.execute(
                update(UserModel)
                .where(UserModel.email == email.strip().lower())
                .values(role=UserRole.ADMIN)
            )
            if result.rowcount == 0:
                print(f"❌ User with email '{email}' not found!")
                return False
            await session.commit()
            print(f"✅ Successfully made '{email}' an admin!")
            return True
    finally:
        await database.dispose()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    ok = asyncio.run(make_user_admin(sys.argv[1]))
    sys.exit(0 if ok else 1)
