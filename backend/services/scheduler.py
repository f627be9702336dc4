"""Periodic refresh of both ranking slots."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from config import Settings
from services.cache import CacheSlot, RankingCaches

logger = logging.getLogger(__name__)


async def run_refresh_job(slot: CacheSlot) -> None:
    logger.info("Running scheduled refresh of %s", slot.name)
    try:
        result = await slot.refresh()
    except Exception:
        logger.exception("Scheduled refresh of %s failed", slot.name)
        return
    logger.info("Scheduled refresh of %s done (%d items)", slot.name, result.inserted)


def create_scheduler(settings: Settings, caches: RankingCaches) -> AsyncIOScheduler:
    sched = AsyncIOScheduler(timezone=settings.scheduler_timezone)
    sched.add_job(
        run_refresh_job,
        CronTrigger(minute=settings.user_refresh_cron_minute, timezone=settings.scheduler_timezone),
        args=[caches.users],
        id="refresh-users",
        max_instances=1,
        coalesce=True,
    )
    sched.add_job(
        run_refresh_job,
        CronTrigger(minute=settings.post_refresh_cron_minute, timezone=settings.scheduler_timezone),
        args=[caches.posts],
        id="refresh-posts",
        max_instances=1,
        coalesce=True,
    )
    return sched
