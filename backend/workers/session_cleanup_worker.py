import asyncio
import logging
from datetime import datetime

from database import get_db

logger = logging.getLogger(__name__)

CHECK_INTERVAL_SECONDS = 60 * 15


async def prune_expired_sessions(db) -> int:
    """Delete sessions past their idle expiry."""
    result = await db.sessions.delete_many({"expires_at": {"$lt": datetime.utcnow()}})
    if result.deleted_count:
        logger.info("SESSIONS_EXPIRED count=%s", result.deleted_count)
    return result.deleted_count


async def session_cleanup_worker():
    db = get_db()

    while True:
        try:
            await prune_expired_sessions(db)
        except Exception:
            logger.exception("SESSION_CLEANUP_ERROR")

        await asyncio.sleep(CHECK_INTERVAL_SECONDS)
