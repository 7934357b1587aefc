from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from features.tides.models.tide_types import TideSummary

class NormalizedConditions(BaseModel):
    """Conditions for one spot and hour, in display units.

    Heights in feet, speeds in mph, temperatures in °F, periods in seconds,
    directions in degrees, precipitation in inches. None means unknown.
    """
    spot_id: str
    spot_name: str
    region: Optional[str] = None
    generated_at: datetime
    hour: int
    buoy_station_id: Optional[str] = None

    wave_height: Optional[float] = None
    swell_height: Optional[float] = None
    swell_period: Optional[float] = None
    swell_direction: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    wind_gust: Optional[float] = None
    air_temperature: Optional[int] = None
    water_temperature: Optional[int] = None
    cloud_cover: Optional[float] = None
    precipitation: Optional[float] = None
    precipitation_probability: Optional[float] = None

    max_wave_height: Optional[float] = None
    max_temperature: Optional[int] = None
    min_temperature: Optional[int] = None
    max_wind_speed: Optional[float] = None
    sunrise: Optional[str] = None
    sunset: Optional[str] = None

    tide: Optional[TideSummary] = None
    sources: Dict[str, str] = {}

class ScoredSpot(BaseModel):
    """A candidate spot for one user during one distribution run."""
    conditions: NormalizedConditions
    skill_match: float
    score: float
    report: Dict[str, Any] = {}

class RankedSelection(BaseModel):
    featured: ScoredSpot
    additional: List[ScoredSpot] = []
