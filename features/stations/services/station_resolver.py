import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence, Tuple

from features.common.models.geo_types import Coordinate
from features.stations.models.station_types import StationLookup
from features.stations.services.station_service import StationService
from features.tides.models.tide_types import TideSample, TideSummary
from features.tides.services import tide_analyzer
from features.tides.services.tide_providers import TideProvider, TideQuery
from features.waves.models.ndbc_types import NDBCObservation
from features.waves.services.ndbc_buoy_client import NDBCBuoyClient

logger = logging.getLogger(__name__)


class TideHistorySource(Protocol):
    async def get_history(self, coordinate: Coordinate, now: Optional[datetime] = None) -> Sequence[TideSample]:
        ...


class StationResolver:
    """Finds the nearest buoy for a spot and the best available tide data.

    Tide providers are tried in order and the first height wins. Provider
    failures are logged and never abort the chain. When every provider comes
    up empty the buoy row is still returned so wind and wave context survive.
    """

    def __init__(
        self,
        station_service: StationService,
        buoy_client: NDBCBuoyClient,
        tide_providers: List[TideProvider],
        history_source: TideHistorySource
    ):
        self.station_service = station_service
        self.buoy_client = buoy_client
        self.tide_providers = tide_providers
        self.history_source = history_source

    async def resolve(
        self,
        coordinate: Coordinate,
        tide_station_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> StationLookup:
        now = now or datetime.now(timezone.utc)
        station = self.station_service.nearest(coordinate)
        observation = await self._fetch_observation(station.station_id) if station else None

        query = TideQuery(
            coordinate=coordinate,
            buoy_station_id=station.station_id if station else None,
            tide_station_id=tide_station_id,
            observation=observation
        )
        height, source = await self._first_tide_height(query)

        tide = None
        if height is not None:
            tide = await self._summarize_history(coordinate, height, source, now)
        else:
            logger.warning(f"🌊 No tide source succeeded for ({coordinate.latitude}, {coordinate.longitude})")

        return StationLookup(station=station, observation=observation, tide=tide)

    async def _fetch_observation(self, station_id: str) -> Optional[NDBCObservation]:
        try:
            return await self.buoy_client.get_observation(station_id)
        except Exception as e:
            logger.warning(f"Buoy feed unavailable for station {station_id}: {str(e)}")
            return None

    async def _first_tide_height(self, query: TideQuery) -> Tuple[Optional[float], Optional[str]]:
        for provider in self.tide_providers:
            try:
                height = await provider.try_fetch(query)
            except Exception as e:
                logger.warning(f"Tide provider {provider.name} failed: {str(e)}")
                continue
            if height is not None:
                logger.debug(f"Tide height {height}ft from {provider.name}")
                return height, provider.name
            logger.info(f"Tide provider {provider.name} returned no data")
        return None, None

    async def _summarize_history(
        self,
        coordinate: Coordinate,
        height: float,
        source: Optional[str],
        now: datetime
    ) -> TideSummary:
        try:
            samples = await self.history_source.get_history(coordinate, now)
        except Exception as e:
            logger.warning(f"Tide history unavailable, trend and extrema unknown: {str(e)}")
            return TideSummary(current_height=height, source=source)

        return tide_analyzer.summarize(samples, now, current=height, source=source)
