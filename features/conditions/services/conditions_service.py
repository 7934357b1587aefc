import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from core.cache import KeyValueStore
from core.config import settings
from features.common.exceptions.forecast_exceptions import SourceUnavailableError
from features.common.models.geo_types import SurfSpot
from features.conditions.models.condition_types import NormalizedConditions
from features.conditions.services.normalizer import normalize
from features.forecast.services.open_meteo_client import OpenMeteoClient
from features.stations.services.station_resolver import StationResolver

logger = logging.getLogger(__name__)

class ConditionsService:
    """Fetches every source for a spot concurrently and normalizes the result."""

    def __init__(
        self,
        forecast_client: OpenMeteoClient,
        station_resolver: StationResolver,
        store: Optional[KeyValueStore] = None
    ):
        self.forecast_client = forecast_client
        self.station_resolver = station_resolver
        self.store = store
        self.tz = ZoneInfo(settings.business_timezone)

    async def get_spot_conditions(
        self,
        spot: SurfSpot,
        hour: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> NormalizedConditions:
        now = now or datetime.now(timezone.utc)
        local_now = now.astimezone(self.tz)
        hour = local_now.hour if hour is None else hour

        cache_key = f"spot_conditions:{spot.id}:{local_now.date().isoformat()}:{hour}"
        if self.store:
            cached = await self.store.get(cache_key)
            if cached:
                return cached

        marine, weather, lookup = await asyncio.gather(
            self.forecast_client.get_marine(spot.coordinate),
            self.forecast_client.get_weather(spot.coordinate),
            self.station_resolver.resolve(spot.coordinate, spot.tide_station, now),
            return_exceptions=True
        )

        if isinstance(marine, Exception):
            logger.warning(f"Marine forecast unavailable for {spot.name}: {str(marine)}")
            marine = None
        if isinstance(weather, Exception):
            logger.warning(f"Weather forecast unavailable for {spot.name}: {str(weather)}")
            weather = None
        if isinstance(lookup, Exception):
            logger.warning(f"Station lookup failed for {spot.name}: {str(lookup)}")
            lookup = None

        has_buoy = lookup is not None and lookup.observation is not None
        if marine is None and weather is None and not has_buoy:
            raise SourceUnavailableError("conditions", f"no source returned data for {spot.name}")

        conditions = normalize(spot, marine, weather, lookup, hour, generated_at=now)
        logger.info(
            f"🏄 {spot.name}: {conditions.wave_height}ft @ {conditions.swell_period}s, "
            f"wind {conditions.wind_speed}mph, tide {conditions.tide.trend.value if conditions.tide else 'n/a'}"
        )

        if self.store:
            await self.store.set(cache_key, conditions, ttl=settings.get_cache_ttl()["spot_conditions"])
        return conditions
