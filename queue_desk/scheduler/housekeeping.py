"""Background housekeeping jobs.

Uses APScheduler BackgroundScheduler to periodically drop expired sign-in
sessions from the store and expired entries from the query cache.
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy import delete

from queue_desk.db.models import AuthSession
from queue_desk.db.session import SessionLocal
from queue_desk.services.query_cache import QueryCache

logger = logging.getLogger(__name__)


def purge_expired_sessions() -> int:
    """Delete auth sessions whose expiry has passed."""
    db = SessionLocal()
    try:
        result = db.execute(
            delete(AuthSession).where(AuthSession.expires_at <= datetime.now(timezone.utc))
        )
        db.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info("Purged %d expired auth session(s).", removed)
        return removed
    except Exception:
        db.rollback()
        logger.exception("Unhandled error in session purge job.")
        return 0
    finally:
        db.close()


def purge_expired_cache(cache: QueryCache) -> int:
    removed = cache.purge_expired()
    if removed:
        logger.debug("Purged %d expired cache entries.", removed)
    return removed


def start_scheduler(cache: QueryCache) -> BackgroundScheduler:
    """Create, configure, and start the housekeeping scheduler.

    Returns the scheduler instance so the caller can shut it down if needed.
    """
    scheduler = BackgroundScheduler(daemon=True)

    scheduler.add_job(
        purge_expired_sessions,
        trigger="interval",
        hours=1,
        id="purge_expired_sessions",
        name="Delete expired sign-in sessions",
        replace_existing=True,
    )
    scheduler.add_job(
        purge_expired_cache,
        trigger="interval",
        seconds=max(int(cache.ttl_seconds), 1),
        id="purge_expired_cache",
        name="Drop expired query cache entries",
        replace_existing=True,
        kwargs={"cache": cache},
    )

    scheduler.start()
    logger.info("Housekeeping scheduler started (cache TTL %ss).", cache.ttl_seconds)
    return scheduler
