"""
create_tables.py
----------------
One-shot script to create every LexCorp table (users, organizations,
branch offices, memberships, invites, agreements, templates, vendors,
projects) in the database named by DATABASE_URL.

Local development can set DB_AUTO_CREATE=true instead. For production
schemas use migrations.

Usage:
    python create_tables.py
"""

import asyncio

from lexcorp.core.config import settings
from lexcorp.core.logging import configure_logging, get_logger
from lexcorp.db.session import engine, init_models

logger = get_logger(__name__)


async def create_all_tables() -> None:
    configure_logging()
    try:
        await init_models(engine)
    finally:
        await engine.dispose()
    logger.info("All tables created", env=settings.APP_ENV)


if __name__ == "__main__":
    asyncio.run(create_all_tables())
