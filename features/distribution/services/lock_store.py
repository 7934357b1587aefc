import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Optional

from core.config import settings
from features.common.exceptions.forecast_exceptions import LockAcquisitionError
from features.distribution.models.distribution_types import (
    Cohort,
    DistributionLock,
    LockState,
    lock_key
)

logger = logging.getLogger(__name__)


class LockStore(ABC):
    """Compare-and-swap over distribution locks keyed by (cohort, date).

    Subclasses provide storage; this class makes read-decide-write a single
    indivisible step so two runs can never both see an absent lock.
    """

    def __init__(self, stale_after: Optional[timedelta] = None):
        self.stale_after = stale_after or timedelta(minutes=settings.stale_lock_minutes)
        self._lock = asyncio.Lock()

    @abstractmethod
    async def _read(self, key: str) -> Optional[DistributionLock]:
        ...

    @abstractmethod
    async def _write(self, lock: DistributionLock) -> None:
        ...

    async def _create(self, lock: DistributionLock) -> bool:
        """Write a new lock document only if none exists. False when one does."""
        if await self._read(lock.key):
            return False
        await self._write(lock)
        return True

    async def get(self, cohort: Cohort, date: str) -> Optional[DistributionLock]:
        return await self._read(lock_key(cohort, date))

    async def acquire(self, cohort: Cohort, date: str, now: datetime) -> Optional[DistributionLock]:
        """Create a running lock, or return None if one exists for the key.

        A running lock older than stale_after is closed as failed on the way,
        so an abandoned run never looks in-progress forever.
        """
        key = lock_key(cohort, date)
        async with self._lock:
            existing = await self._read(key)
            if existing:
                if existing.state == LockState.RUNNING and now - existing.last_run > self.stale_after:
                    logger.error(f"🔒 Lock {key} stuck in running since {existing.last_run}, marking failed")
                    await self._write(existing.model_copy(update={
                        "state": LockState.FAILED,
                        "completed_at": now,
                        "error": f"stale: no completion within {self.stale_after}"
                    }))
                else:
                    logger.info(f"🔒 Lock {key} already {existing.state.value}, skipping")
                return None

            lock = DistributionLock(cohort=cohort, date=date, last_run=now)
            if not await self._create(lock):
                logger.info(f"🔒 Lock {key} created elsewhere first, skipping")
                return None
            logger.info(f"🔓 Acquired lock {key}")
            return lock

    async def finish(self, lock: DistributionLock) -> bool:
        """Persist a terminal transition. Only a running lock can be finished."""
        if lock.state == LockState.RUNNING:
            raise ValueError("finish() needs a completed or failed lock")

        async with self._lock:
            current = await self._read(lock.key)
            if not current or current.state != LockState.RUNNING:
                logger.warning(f"Lock {lock.key} is no longer running, not overwriting")
                return False
            await self._write(lock)
            logger.info(f"🔒 Lock {lock.key} -> {lock.state.value}")
            return True


class InMemoryLockStore(LockStore):
    def __init__(self, stale_after: Optional[timedelta] = None):
        super().__init__(stale_after)
        self._documents: Dict[str, DistributionLock] = {}

    async def _read(self, key: str) -> Optional[DistributionLock]:
        return self._documents.get(key)

    async def _write(self, lock: DistributionLock) -> None:
        self._documents[lock.key] = lock


class FileLockStore(LockStore):
    """One JSON document per key.

    New documents are created exclusively and later transitions replace the
    file atomically, so several worker processes may share one directory.
    """

    def __init__(self, base_dir: Optional[str] = None, stale_after: Optional[timedelta] = None):
        super().__init__(stale_after)
        self.base_dir = Path(base_dir or settings.lock_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key.replace(':', '_')}.json"

    async def _read(self, key: str) -> Optional[DistributionLock]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                return DistributionLock.model_validate(json.load(f))
        except (OSError, ValueError) as e:
            raise LockAcquisitionError(f"Unreadable lock document {path}: {str(e)}")

    async def _create(self, lock: DistributionLock) -> bool:
        """Exclusive create, so two processes sharing the directory cannot both win.

        The document is written to a private temp file and hard-linked into
        place; link() fails if the target exists, and readers never see a
        half-written lock.
        """
        path = self._path(lock.key)
        tmp_path = path.with_suffix(f".{os.getpid()}.tmp")
        try:
            with open(tmp_path, "w") as f:
                f.write(lock.model_dump_json(indent=2))
            os.link(tmp_path, path)
        except FileExistsError:
            return False
        except OSError as e:
            raise LockAcquisitionError(f"Could not create lock document {path}: {str(e)}")
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        return True

    async def _write(self, lock: DistributionLock) -> None:
        path = self._path(lock.key)
        tmp_path = path.with_suffix(f".{os.getpid()}.tmp")
        try:
            with open(tmp_path, "w") as f:
                f.write(lock.model_dump_json(indent=2))
            os.replace(tmp_path, path)
        except OSError as e:
            raise LockAcquisitionError(f"Could not write lock document {path}: {str(e)}")
