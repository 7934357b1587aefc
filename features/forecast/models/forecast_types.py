from typing import Any, Dict, List, Optional
from pydantic import BaseModel

MARINE_HOURLY = [
    "wave_height",
    "wave_period",
    "wave_direction",
    "swell_wave_height",
    "swell_wave_period",
    "swell_wave_direction",
    "sea_surface_temperature",
]
MARINE_DAILY = [
    "wave_height_max",
    "wave_period_max",
    "wave_direction_dominant",
]
WEATHER_HOURLY = [
    "temperature_2m",
    "wind_speed_10m",
    "wind_direction_10m",
    "wind_gusts_10m",
    "cloud_cover",
    "precipitation",
    "precipitation_probability",
]
WEATHER_DAILY = [
    "temperature_2m_max",
    "temperature_2m_min",
    "wind_speed_10m_max",
    "precipitation_sum",
    "sunrise",
    "sunset",
]


class HourlyDailySeries(BaseModel):
    """Raw Open-Meteo arrays keyed by variable name, indexed by local hour / day."""
    hourly: Dict[str, List[Any]] = {}
    daily: Dict[str, List[Any]] = {}

    def hourly_value(self, name: str, hour: int) -> Optional[Any]:
        values = self.hourly.get(name) or []
        return values[hour] if 0 <= hour < len(values) else None

    def today(self, name: str) -> Optional[Any]:
        values = self.daily.get(name) or []
        return values[0] if values else None


class MarineSample(HourlyDailySeries):
    """Open-Meteo marine arrays. Heights in meters, periods in seconds, SST in Celsius."""
    pass


class WeatherSample(HourlyDailySeries):
    """Open-Meteo forecast arrays. Temperatures in Celsius, wind in km/h."""
    pass
