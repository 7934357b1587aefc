"""Trend, extrema and range for a chronological series of tide samples.

The thresholds below are noise-tolerance policy. A shorter trend window
overreacts to sensor jitter, and twelve hourly readings (about half a day)
are enough to bound a genuine high or low. Below those sizes the analyzer
answers "unknown" or None instead of guessing.
"""
from datetime import datetime
from typing import Optional, Sequence, Union

from features.tides.models.tide_types import (
    TideExtreme,
    TideExtremeKind,
    TideRange,
    TideSample,
    TideSummary,
    TideTrend
)

TREND_WINDOW = 6
MIN_SAMPLES_FOR_EXTREMA = 12
STABLE_THRESHOLD = 0.1

Instant = Union[datetime, int, float]


def _to_timestamp(now: Instant) -> float:
    if isinstance(now, datetime):
        return now.timestamp()
    return float(now)


def trend(samples: Sequence[TideSample]) -> TideTrend:
    """Direction of the tide over the most recent samples."""
    if len(samples) < 2:
        return TideTrend.UNKNOWN

    window = samples[-TREND_WINDOW:]
    delta = window[-1].height - window[0].height
    if abs(delta) < STABLE_THRESHOLD:
        return TideTrend.STABLE
    return TideTrend.RISING if delta > 0 else TideTrend.FALLING


def next_extreme(
    samples: Sequence[TideSample],
    now: Instant,
    kind: TideExtremeKind
) -> Optional[TideExtreme]:
    """Highest or lowest sample strictly after now. Ties go to the earliest."""
    if len(samples) < MIN_SAMPLES_FOR_EXTREMA:
        return None

    cutoff = _to_timestamp(now)
    future = [s for s in samples if s.timestamp > cutoff]
    if not future:
        return None

    pick = max if kind == TideExtremeKind.HIGH else min
    best = pick(future, key=lambda s: s.height)
    return TideExtreme(time=best.timestamp, height=best.height)


def tide_range(samples: Sequence[TideSample]) -> Optional[TideRange]:
    if len(samples) < MIN_SAMPLES_FOR_EXTREMA:
        return None

    heights = [s.height for s in samples]
    low, high = min(heights), max(heights)
    return TideRange(min=low, max=high, range=round(high - low, 2))


def current_height(samples: Sequence[TideSample], now: Instant) -> Optional[float]:
    """Latest sample at or before now, falling back to the first sample."""
    cutoff = _to_timestamp(now)
    past = [s for s in samples if s.timestamp <= cutoff]
    if past:
        return past[-1].height
    return samples[0].height if samples else None


def summarize(
    samples: Sequence[TideSample],
    now: Instant,
    current: Optional[float] = None,
    source: Optional[str] = None
) -> TideSummary:
    """Build a TideSummary from a series. Trend only considers samples up to now."""
    cutoff = _to_timestamp(now)
    observed = [s for s in samples if s.timestamp <= cutoff]
    return TideSummary(
        current_height=current if current is not None else current_height(samples, now),
        trend=trend(observed),
        next_high=next_extreme(samples, now, TideExtremeKind.HIGH),
        next_low=next_extreme(samples, now, TideExtremeKind.LOW),
        range=tide_range(samples),
        source=source
    )
