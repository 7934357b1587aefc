from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict

class TideTrend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"
    UNKNOWN = "unknown"

class TideExtremeKind(str, Enum):
    HIGH = "high"
    LOW = "low"

class TideSample(BaseModel):
    """Single tide height reading."""
    model_config = ConfigDict(frozen=True)

    timestamp: int  # unix seconds
    height: float  # feet

class TideExtreme(BaseModel):
    time: int  # unix seconds
    height: float

class TideRange(BaseModel):
    min: float
    max: float
    range: float

class TideSummary(BaseModel):
    """Tide state derived for one report cycle. Never cached beyond it."""
    current_height: Optional[float] = None
    trend: TideTrend = TideTrend.UNKNOWN
    next_high: Optional[TideExtreme] = None
    next_low: Optional[TideExtreme] = None
    range: Optional[TideRange] = None
    source: Optional[str] = None
