import asyncio
import logging
from datetime import datetime, timedelta

from config.constants import AUDIT_RETENTION_DAYS
from database import get_db

logger = logging.getLogger(__name__)

CHECK_INTERVAL_SECONDS = 60 * 60  # hourly


async def prune_audit_logs(db) -> int:
    cutoff = datetime.utcnow() - timedelta(days=AUDIT_RETENTION_DAYS)
    result = await db.audit_logs.delete_many({"created_at": {"$lt": cutoff}})
    return result.deleted_count


async def audit_cleanup_worker():
    db = get_db()

    while True:
        try:
            await prune_audit_logs(db)
        except Exception:
            logger.exception("AUDIT_CLEANUP_ERROR")

        await asyncio.sleep(CHECK_INTERVAL_SECONDS)
