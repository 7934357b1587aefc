import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from core.config import settings
from features.common.exceptions.forecast_exceptions import SourceUnavailableError
from features.common.models.geo_types import Coordinate
from features.common.services.http_client import HttpClient
from features.common.utils.conversions import FEET_PER_METER
from features.tides.models.tide_types import TideSample

logger = logging.getLogger(__name__)


class WorldTidesClient(HttpClient):
    """WorldTides heights API, queried by coordinate."""

    source_name = "worldtides"

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key or settings.worldtides_api_key

    async def get_heights(
        self,
        coordinate: Coordinate,
        start: datetime,
        length_seconds: int,
        step_seconds: int = 3600
    ) -> List[TideSample]:
        """Tide heights in feet, oldest first."""
        if not self.api_key:
            raise SourceUnavailableError(self.source_name, "no API key configured")

        params = {
            "heights": "",
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "start": int(start.timestamp()),
            "length": length_seconds,
            "step": step_seconds,
            "key": self.api_key
        }
        data = await self.get_json(settings.worldtides_base_url, params=params)

        if data.get("status") != 200 or "error" in data:
            raise SourceUnavailableError(self.source_name, data.get("error", "unknown error"))

        samples = [
            TideSample(timestamp=int(h["dt"]), height=round(float(h["height"]) * FEET_PER_METER, 2))
            for h in data.get("heights", [])
            if h.get("height") is not None
        ]
        return sorted(samples, key=lambda s: s.timestamp)

    async def get_current_height(self, coordinate: Coordinate, now: Optional[datetime] = None) -> Optional[float]:
        """Height at the sample closest to now."""
        now = now or datetime.now(timezone.utc)
        samples = await self.get_heights(coordinate, now - timedelta(minutes=30), 3600, 1800)
        if not samples:
            return None
        closest = min(samples, key=lambda s: abs(s.timestamp - now.timestamp()))
        return closest.height

    async def get_history(self, coordinate: Coordinate, now: Optional[datetime] = None) -> List[TideSample]:
        """Hourly window spanning the past and next half day around now."""
        now = now or datetime.now(timezone.utc)
        span = settings.tide_history_hours
        return await self.get_heights(
            coordinate,
            now - timedelta(hours=span / 2),
            span * 3600,
            settings.tide_history_step_seconds
        )


class CoopsClient(HttpClient):
    """NOAA CO-OPS tide predictions, queried by station id."""

    source_name = "coops"

    async def get_predictions(self, station_id: str, start: datetime, hours: int = 24) -> List[Dict[str, Any]]:
        params = {
            **settings.coops_params,
            "station": station_id,
            "begin_date": start.astimezone(timezone.utc).strftime("%Y%m%d %H:%M"),
            "range": hours,
            "interval": "h"
        }
        data = await self.get_json(settings.coops_base_url, params=params)

        if "error" in data:
            raise SourceUnavailableError(
                self.source_name,
                data["error"].get("message", "Unknown error from NOAA API")
            )
        return data.get("predictions", [])

    async def get_next_prediction(self, station_id: str, now: Optional[datetime] = None) -> Optional[float]:
        """Height of the first prediction after now, in feet."""
        now = now or datetime.now(timezone.utc)
        predictions = await self.get_predictions(station_id, now - timedelta(hours=1))
        for p in predictions:
            t = datetime.strptime(p["t"], "%Y-%m-%d %H:%M").replace(tzinfo=timezone.utc)
            if t > now and p.get("v") not in (None, ""):
                return float(p["v"])
        return None
