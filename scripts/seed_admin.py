#!/usr/bin/env python3
"""Create or promote the admin account from SECURE_APP_ADMIN_EMAIL / SECURE_APP_ADMIN_PASSWORD."""
from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from secure_app.core.config import Settings, get_settings
from secure_app.core.security import PasswordHasher
from secure_app.db.session import Database
from secure_app.services.users import upsert_admin

logger = logging.getLogger("seed_admin")


async def seed_admin(settings: Settings) -> None:
    hasher = PasswordHasher(time_cost=settings.password_time_cost, memory_cost=settings.password_memory_cost)
    database = Database(settings.sqlalchemy_url, pool_size=1)
    try:
        await database.create_all()
        password_hash = hasher.hash(settings.admin_password)
        async with database.session() as session:
            user = await upsert_admin(session, settings.admin_email, password_hash)
            await session.commit()
        logger.info("Admin user created/updated: %s", user.email)
    finally:
        await database.dispose()


def main() -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    try:
        asyncio.run(seed_admin(settings))
    except Exception:
        logger.exception("Admin seeding failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
