import logging
from typing import Any, Dict

from core.config import settings
from features.common.exceptions.forecast_exceptions import SourceUnavailableError
from features.common.models.geo_types import Coordinate
from features.common.services.http_client import HttpClient
from features.forecast.models.forecast_types import (
    MARINE_DAILY,
    MARINE_HOURLY,
    WEATHER_DAILY,
    WEATHER_HOURLY,
    MarineSample,
    WeatherSample
)

logger = logging.getLogger(__name__)


class OpenMeteoClient(HttpClient):
    """Marine and weather forecasts for today, in the business timezone."""

    source_name = "open-meteo"

    def _params(self, coordinate: Coordinate, hourly, daily) -> Dict[str, Any]:
        return {
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "hourly": ",".join(hourly),
            "daily": ",".join(daily),
            "timezone": settings.business_timezone,
            "forecast_days": 1
        }

    def _check(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if data.get("error"):
            raise SourceUnavailableError(self.source_name, data.get("reason", "unknown error"))
        if "hourly" not in data:
            raise SourceUnavailableError(self.source_name, "response has no hourly data")
        return data

    async def get_marine(self, coordinate: Coordinate) -> MarineSample:
        data = await self.get_json(
            settings.marine_base_url,
            params=self._params(coordinate, MARINE_HOURLY, MARINE_DAILY)
        )
        data = self._check(data)
        return MarineSample(hourly=data.get("hourly", {}), daily=data.get("daily", {}))

    async def get_weather(self, coordinate: Coordinate) -> WeatherSample:
        params = self._params(coordinate, WEATHER_HOURLY, WEATHER_DAILY)
        params["wind_speed_unit"] = "kmh"
        data = await self.get_json(settings.weather_base_url, params=params)
        data = self._check(data)
        return WeatherSample(hourly=data.get("hourly", {}), daily=data.get("daily", {}))
