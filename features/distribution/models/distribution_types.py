from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel

class Cohort(str, Enum):
    REGULAR = "regular"
    PREMIUM = "premium"

class LockState(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

class DistributionLock(BaseModel):
    """Per-(cohort, date) run record. Documents are never deleted."""
    cohort: Cohort
    date: str  # YYYY-MM-DD in the business timezone
    state: LockState = LockState.RUNNING
    success_count: int = 0
    error_count: int = 0
    last_run: datetime
    completed_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def key(self) -> str:
        return lock_key(self.cohort, self.date)

def lock_key(cohort: Cohort, date: str) -> str:
    return f"{cohort.value}:{date}"

class UserProfile(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    email_verified: bool = False
    premium: bool = False
    spot_ids: List[str] = []
    skill_level: Optional[str] = None
    board_type: Optional[str] = None
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

class RunResult(BaseModel):
    cohort: Cohort
    date: str
    skipped: bool = False
    state: Optional[LockState] = None
    success_count: int = 0
    error_count: int = 0
    skipped_users: int = 0
