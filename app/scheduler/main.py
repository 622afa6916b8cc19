"""
Scheduler

One daily sweep: every user with an active plan goes through the order
sheet pipeline. The run-day gate inside the orchestrator decides who
actually gets a sheet today, so the job itself stays trivial.
"""

import asyncio
import logging
from typing import Callable, Optional, Tuple

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.config import AppConfig
from app.core.logging import setup_logging
from app.domain.models import SweepSummary
from app.infrastructure.db.repositories.plan_repository import PlanRepository
from app.services.execution_orchestrator import ExecutionOrchestrator
from app.services.orchestrator_factory import build_orchestrator

logger = logging.getLogger(__name__)


def parse_run_time(value: str) -> Tuple[int, int]:
    """Parse "HH:MM" into (hour, minute)."""
    try:
        hour_text, minute_text = value.strip().split(":")
        hour, minute = int(hour_text), int(minute_text)
    except ValueError:
        raise ValueError(f"Invalid SCHEDULER_RUN_TIME: {value!r} (expected HH:MM)") from None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid SCHEDULER_RUN_TIME: {value!r} (expected HH:MM)")
    return hour, minute


class DCAScheduler:
    """Runs the daily order sheet sweep on an APScheduler cron trigger"""

    def __init__(
        self,
        session_factory: Optional[Callable[[], AsyncSession]] = None,
        orchestrator_builder: Callable[[AsyncSession], ExecutionOrchestrator] = build_orchestrator,
        timezone: str = settings.TIMEZONE,
        run_time: str = settings.SCHEDULER_RUN_TIME,
    ):
        if session_factory is None:
            from app.infrastructure.db.database import async_session_factory
            session_factory = async_session_factory
        self.session_factory = session_factory
        self.orchestrator_builder = orchestrator_builder
        self.timezone = timezone
        self.hour, self.minute = parse_run_time(run_time)
        self.scheduler = AsyncIOScheduler(timezone=pytz.timezone(timezone))

    async def run_daily_sweep(self) -> SweepSummary:
        logger.info("Starting daily sweep")
        async with self.session_factory() as session:
            user_ids = await PlanRepository(session).list_active_user_ids()
            logger.info("Active plans: %d", len(user_ids))
            # Stores roll back their own failed commits, so one user's
            # failure leaves the shared session usable for the rest
            orchestrator = self.orchestrator_builder(session)
            return await orchestrator.run_all(user_ids)

    async def _run_job(self) -> None:
        try:
            await self.run_daily_sweep()
        except Exception:
            logger.exception("Daily sweep failed")

    def start(self) -> None:
        self.scheduler.add_job(
            self._run_job,
            CronTrigger(hour=self.hour, minute=self.minute),
            id="daily_sweep",
            name="Daily Order Sheet Sweep",
            replace_existing=True,
        )
        self.scheduler.start()
        for job in self.scheduler.get_jobs():
            logger.info("Scheduled %s | next run: %s", job.name, job.next_run_time)

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Scheduler stopped")


async def main():
    """Standalone scheduler process"""
    config = AppConfig.load()
    setup_logging(config.log_level)
    if not config.scheduler_enabled:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
        return

    logger.info("Scheduler starting | env=%s | tz=%s | run_time=%s", config.environment, config.timezone, config.run_time)
    scheduler = DCAScheduler(timezone=config.timezone, run_time=config.run_time)
    scheduler.start()
    try:
        while True:
            await asyncio.sleep(1)
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        scheduler.stop()


if __name__ == "__main__":
    asyncio.run(main())
