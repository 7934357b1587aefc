import logging
from typing import Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from core.config import settings
from features.distribution.models.distribution_types import Cohort
from features.distribution.services.distribution_coordinator import DistributionCoordinator

logger = logging.getLogger(__name__)


class Scheduler:
    def __init__(self, coordinators: Dict[Cohort, DistributionCoordinator]):
        self.scheduler = AsyncIOScheduler(timezone=settings.business_timezone)
        self.coordinators = coordinators

    def start(self):
        """Start the scheduler with one daily job per cohort."""
        logger.info("Starting scheduler")

        for cohort, coordinator in self.coordinators.items():
            self.scheduler.add_job(
                coordinator.run,
                CronTrigger(
                    hour=settings.send_hour,
                    minute=settings.send_minute,
                    timezone=settings.business_timezone
                ),
                id=f"daily_forecast_{cohort.value}",
                name=f"daily_forecast_{cohort.value}",
                misfire_grace_time=3600,
                coalesce=True,
                max_instances=1
            )
            logger.info(
                f"📅 Scheduled {cohort.value} cohort daily at "
                f"{settings.send_hour:02d}:{settings.send_minute:02d} {settings.business_timezone}"
            )

        self.scheduler.start()
        logger.info("Scheduler started successfully")

    def get_next_run_time(self, job_id: str) -> Optional[str]:
        """Get the next run time for a scheduled job."""
        job = self.scheduler.get_job(job_id)
        if job and job.next_run_time:
            return job.next_run_time.isoformat()
        return None

    def shutdown(self):
        """Shutdown the scheduler."""
        if self.scheduler.running:
            logger.info("Shutting down scheduler")
            self.scheduler.shutdown()
            logger.info("Scheduler shutdown complete")
