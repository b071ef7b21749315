# cancelflow/scheduler/jobs.py
from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from cancelflow.repositories.memory import MemoryCancellationStore, MemorySubscriptionStore

logger = logging.getLogger(__name__)

PURGE_JOB_ID = "purge_memory_store"


async def purge_memory_store_job(
    cancellations: MemoryCancellationStore,
    subscriptions: MemorySubscriptionStore,
) -> int:
    """
    Periodic job: wipes the in-memory cancellations and puts the demo
    subscriptions back to active, so the flow can be walked again.
    """
    n = cancellations.clear()
    subscriptions.reset()
    logger.info("memory store cleared, removed=%s", n)
    return n


def setup_scheduler(
    scheduler: AsyncIOScheduler,
    cancellations: MemoryCancellationStore,
    subscriptions: MemorySubscriptionStore,
    *,
    minutes: int,
) -> bool:
    """
    Registers the purge job. Called once at startup, only for the memory backend.
    Returns False when the interval is disabled (minutes <= 0).
    """
    if minutes <= 0:
        return False
    scheduler.add_job(
        purge_memory_store_job,
        trigger="interval",
        minutes=minutes,
        kwargs={"cancellations": cancellations, "subscriptions": subscriptions},
        id=PURGE_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=60,
    )
    return True
