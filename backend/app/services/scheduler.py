"""Background jobs."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.config import settings
from app.db.base import Database
from app.repositories.users import UserRepository

logger = logging.getLogger(__name__)


async def purge_expired_sessions(database: Database) -> int:
    """Delete every session row past its expiry."""
    async with database.session_factory() as session:
        removed = await UserRepository(session, database.dialect).purge_expired_sessions()
    if removed:
        logger.info("Session sweep removed %s expired sessions", removed)
    return removed


def build_scheduler(database: Database) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        purge_expired_sessions,
        "interval",
        minutes=settings.SESSION_CLEANUP_INTERVAL_MINUTES,
        args=[database],
        id="purge_expired_sessions",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler
