import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from core.config import settings
from features.common.exceptions.forecast_exceptions import BatchFatalError, ReportSkippedError
from features.distribution.models.distribution_types import (
    Cohort,
    DistributionLock,
    LockState,
    RunResult,
    UserProfile
)
from features.distribution.services.collaborators import UserRepository
from features.distribution.services.lock_store import LockStore
from features.distribution.services.report_service import ReportService

logger = logging.getLogger(__name__)


class DistributionCoordinator:
    """Runs one cohort's daily send at most once per business date.

    Lock lifecycle per (cohort, date): absent -> running -> completed | failed.
    Per-user failures are counted and recorded but never stop the batch.
    Anything escaping the user loop fails the lock. Terminal states are
    final; a missed day needs an operator.
    """

    def __init__(
        self,
        cohort: Cohort,
        lock_store: LockStore,
        users: UserRepository,
        report_service: ReportService,
        timezone_name: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.cohort = cohort
        self.lock_store = lock_store
        self.users = users
        self.report_service = report_service
        self.tz = ZoneInfo(timezone_name or settings.business_timezone)
        self._clock = clock

    def business_date(self, now: Optional[datetime] = None) -> str:
        """Calendar day in the business timezone as YYYY-MM-DD."""
        now = now or self._clock()
        return now.astimezone(self.tz).date().isoformat()

    async def run(self, date: Optional[str] = None) -> RunResult:
        now = self._clock()
        date = date or self.business_date(now)
        logger.info(f"🚀 Starting {self.cohort.value} distribution for {date}")

        lock = await self.lock_store.acquire(self.cohort, date, now)
        if lock is None:
            existing = await self.lock_store.get(self.cohort, date)
            return RunResult(
                cohort=self.cohort,
                date=date,
                skipped=True,
                state=existing.state if existing else None
            )

        result = RunResult(cohort=self.cohort, date=date, state=LockState.RUNNING)
        try:
            await self._process_cohort(result, date, now)
        except asyncio.CancelledError:
            await self._finish(lock, result, LockState.FAILED, "run cancelled")
            raise
        except Exception as e:
            logger.error(f"❌ {self.cohort.value} distribution for {date} failed: {str(e)}")
            await self._finish(lock, result, LockState.FAILED, str(e))
            return result

        await self._finish(lock, result, LockState.COMPLETED)
        logger.info(
            f"✅ {self.cohort.value} distribution for {date} completed: "
            f"{result.success_count} sent, {result.error_count} errors, {result.skipped_users} skipped"
        )
        return result

    async def _process_cohort(self, result: RunResult, date: str, now: datetime) -> None:
        try:
            users = await self.users.list_cohort(self.cohort)
        except Exception as e:
            raise BatchFatalError(f"Could not load {self.cohort.value} cohort: {str(e)}") from e

        logger.info(f"Processing {len(users)} {self.cohort.value} users")
        # Sequential on purpose: bounds the email provider rate
        for user in users:
            try:
                profile = await self.users.get_user(user.id) or user
                if await self.report_service.deliver(profile, date, now):
                    result.success_count += 1
                else:
                    result.skipped_users += 1
            except ReportSkippedError as e:
                # Skipped, but the failures stay visible on the user record
                result.skipped_users += 1
                logger.warning(f"Skipped user {user.id}, every spot failed: {str(e)}")
                await self._record_user_error(user, str(e))
            except Exception as e:
                result.error_count += 1
                logger.error(f"Report for user {user.id} failed: {str(e)}")
                await self._record_user_error(user, str(e))

    async def _record_user_error(self, user: UserProfile, message: str) -> None:
        try:
            await self.users.record_error(user.id, message, self._clock())
        except Exception as e:
            logger.error(f"Could not record error for user {user.id}: {str(e)}")

    async def _finish(
        self,
        lock: DistributionLock,
        result: RunResult,
        state: LockState,
        error: Optional[str] = None
    ) -> None:
        result.state = state
        await self.lock_store.finish(lock.model_copy(update={
            "state": state,
            "success_count": result.success_count,
            "error_count": result.error_count,
            "completed_at": self._clock(),
            "error": error
        }))
