"""
scheduler.py

Responsibility: Sets up the APScheduler AsyncIOScheduler and registers the
DDNS check job.
Does NOT: contain DNS business logic, config reading, or HTTP calls directly
— those are delegated entirely to DnsService and its collaborators.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from services.dns_service import DnsService

logger = logging.getLogger(__name__)

# Job ID used to identify the DDNS check job in APScheduler
JOB_ID = "ddns_check"


async def _ddns_check_job(dns_service: DnsService) -> None:
    """
    APScheduler job: runs one DDNS check cycle.

    Per-domain errors are handled inside DnsService; anything that still
    escapes is logged here so the job keeps its schedule.
    """
    logger.debug("DDNS check job triggered.")
    try:
        await dns_service.run_check_cycle()
    except Exception:
        logger.exception("DDNS check cycle %d aborted.", dns_service.cycle)
    logger.info("Sleeping for next check cycle...")


def create_scheduler(dns_service: DnsService, interval_seconds: int = 120) -> AsyncIOScheduler:
    """
    Creates and returns a configured AsyncIOScheduler with the DDNS check job.

    The job runs immediately on startup (next_run_time=now) and then at the
    configured interval. The scheduler must be started from inside a running
    event loop.

    Args:
        dns_service: The service whose run_check_cycle() the job calls.
        interval_seconds: Seconds between DDNS check cycles (default 120).

    Returns:
        A configured but not yet started AsyncIOScheduler.
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        _ddns_check_job,
        trigger="interval",
        seconds=interval_seconds,
        id=JOB_ID,
        kwargs={"dns_service": dns_service},
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,  # Prevent overlapping runs if a cycle takes too long
        coalesce=True,
    )
    logger.info("DDNS check job scheduled — interval: %ds.", interval_seconds)
    return scheduler
