"""Application context shared by request handlers.

Created once in the FastAPI lifespan and stored on ``app.state.context``;
handlers reach it through the ``get_context`` dependency instead of importing
module-level singletons.
"""

import logging
from dataclasses import dataclass, field

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import Request

from queue_desk.catalog import VariantConfig, get_variant
from queue_desk.core import config
from queue_desk.scheduler.housekeeping import start_scheduler
from queue_desk.services.change_feed import ChangeFeed
from queue_desk.services.query_cache import QueryCache

logger = logging.getLogger(__name__)

CACHED_TABLES = ("bookings", "branches", "user_profiles")

# Booking listings embed branch and customer names.
CACHE_DEPENDENTS = {
    "branches": ("bookings",),
    "user_profiles": ("bookings",),
}


@dataclass
class AppContext:
    variant: VariantConfig
    feed: ChangeFeed = field(default_factory=ChangeFeed)
    cache: QueryCache = field(default_factory=QueryCache)
    scheduler: BackgroundScheduler | None = None

    def start(self, enable_scheduler: bool = False) -> None:
        self.cache.attach(self.feed, CACHED_TABLES, CACHE_DEPENDENTS)
        if enable_scheduler:
            try:
                self.scheduler = start_scheduler(self.cache)
            except Exception:
                logger.exception("Failed to start scheduler.")
                self.scheduler = None
        logger.info("Application context started for variant %s.", self.variant.name)

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
            logger.info("Housekeeping scheduler shut down.")
        self.cache.detach()
        self.cache.clear()
        self.feed.clear()


def build_context(variant_name: str | None = None) -> AppContext:
    return AppContext(
        variant=get_variant(variant_name or config.VARIANT),
        cache=QueryCache(ttl_seconds=config.CACHE_TTL_SECONDS),
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context
