import logging
from typing import Optional, Protocol

from pydantic import BaseModel

from features.common.models.geo_types import Coordinate
from features.tides.services.tide_service import CoopsClient, WorldTidesClient
from features.waves.models.ndbc_types import NDBCObservation

logger = logging.getLogger(__name__)


class TideQuery(BaseModel):
    """Everything a tide provider may key its lookup on."""
    coordinate: Coordinate  # the spot itself, not the buoy
    buoy_station_id: Optional[str] = None
    tide_station_id: Optional[str] = None
    observation: Optional[NDBCObservation] = None


class TideProvider(Protocol):
    name: str

    async def try_fetch(self, query: TideQuery) -> Optional[float]:
        """Current tide height in feet, None when the provider has nothing."""
        ...


class BuoyTideProvider:
    """Tide column of the already-fetched realtime buoy row."""

    name = "ndbc"

    async def try_fetch(self, query: TideQuery) -> Optional[float]:
        if not query.observation:
            return None
        return query.observation.met.tide


class WorldTidesProvider:
    name = "worldtides"

    def __init__(self, client: WorldTidesClient):
        self.client = client

    async def try_fetch(self, query: TideQuery) -> Optional[float]:
        return await self.client.get_current_height(query.coordinate)


class CoopsPredictionProvider:
    name = "coops"

    def __init__(self, client: CoopsClient):
        self.client = client

    async def try_fetch(self, query: TideQuery) -> Optional[float]:
        station_id = query.tide_station_id or query.buoy_station_id
        if not station_id:
            return None
        return await self.client.get_next_prediction(station_id)
