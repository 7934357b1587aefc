import logging
from datetime import datetime, timezone
from typing import List, Optional

from core.cache import KeyValueStore
from core.config import settings
from features.common.exceptions.forecast_exceptions import SourceUnavailableError
from features.common.services.http_client import HttpClient
from features.waves.models.ndbc_types import (
    NDBCWindData,
    NDBCWaveData,
    NDBCMetData,
    NDBCDataAge,
    NDBCObservation
)

logger = logging.getLogger(__name__)

# Column positions in the realtime2 standard meteorological file:
# #YY MM DD hh mm WDIR WSPD GST WVHT DPD APD MWD PRES ATMP WTMP DEWP VIS PTDY TIDE
COL_WDIR = 5
COL_WSPD = 6
COL_GST = 7
COL_WVHT = 8
COL_DPD = 9
COL_APD = 10
COL_MWD = 11
COL_PRES = 12
COL_ATMP = 13
COL_WTMP = 14
COL_DEWP = 15
COL_VIS = 16
COL_PTDY = 17
COL_TIDE = 18

STALE_MINUTES = 45


def _parse_value(columns: List[str], index: int) -> Optional[float]:
    """Parse one NDBC column, handling short rows and missing value indicators."""
    if index >= len(columns):
        return None
    value = columns[index]
    if value in ['MM', 'missing']:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def data_age(obs_time: Optional[datetime], now: Optional[datetime] = None) -> Optional[NDBCDataAge]:
    """Age of an observation as of now; None when the row had no timestamp."""
    if obs_time is None:
        return None
    now = now or datetime.now(timezone.utc)
    age_minutes = (now - obs_time).total_seconds() / 60
    return NDBCDataAge(minutes=age_minutes, isStale=age_minutes > STALE_MINUTES)


def _parse_time(columns: List[str]) -> Optional[datetime]:
    try:
        year, month, day, hour, minute = (int(c) for c in columns[:5])
        return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_realtime_report(
    station_id: str,
    text: str,
    now: Optional[datetime] = None
) -> Optional[NDBCObservation]:
    """Parse the first data row of an NDBC realtime text report.

    Header lines start with '#'. Only the newest observation is used.
    """
    rows = [line.split() for line in text.strip().splitlines() if line.strip()]
    data_rows = [row for row in rows if not row[0].startswith('#')]
    if not data_rows or len(data_rows[0]) < 5:
        return None

    columns = data_rows[0]
    obs_time = _parse_time(columns)

    return NDBCObservation(
        station_id=station_id,
        time=obs_time,
        wind=NDBCWindData(
            direction=_parse_value(columns, COL_WDIR),
            speed=_parse_value(columns, COL_WSPD),
            gust=_parse_value(columns, COL_GST)
        ),
        wave=NDBCWaveData(
            height=_parse_value(columns, COL_WVHT),
            period=_parse_value(columns, COL_DPD),
            average_period=_parse_value(columns, COL_APD),
            direction=_parse_value(columns, COL_MWD)
        ),
        met=NDBCMetData(
            pressure=_parse_value(columns, COL_PRES),
            air_temp=_parse_value(columns, COL_ATMP),
            water_temp=_parse_value(columns, COL_WTMP),
            dewpoint=_parse_value(columns, COL_DEWP),
            visibility=_parse_value(columns, COL_VIS),
            pressure_tendency=_parse_value(columns, COL_PTDY),
            tide=_parse_value(columns, COL_TIDE)
        ),
        data_age=data_age(obs_time, now)
    )


class NDBCBuoyClient(HttpClient):
    source_name = "ndbc"

    def __init__(self, store: Optional[KeyValueStore] = None, **kwargs):
        super().__init__(**kwargs)
        self.store = store

    async def get_observation(self, station_id: str, now: Optional[datetime] = None) -> NDBCObservation:
        """Get latest observation for a station from the realtime feed."""
        cache_key = f"buoy_report:{station_id}"
        if self.store:
            cached = await self.store.get(cache_key)
            if cached:
                # Age keeps moving while the row sits in the cache
                return cached.model_copy(update={"data_age": data_age(cached.time, now)})

        url = f"{settings.ndbc_base_url}{station_id}.txt"
        text = await self.get_text(url)
        observation = parse_realtime_report(station_id, text, now)
        if not observation:
            raise SourceUnavailableError(self.source_name, f"no data rows for station {station_id}")

        if self.store:
            await self.store.set(cache_key, observation, ttl=settings.get_cache_ttl()["buoy_report"])
        return observation
