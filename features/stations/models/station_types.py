from typing import Optional
from pydantic import BaseModel

from features.common.models.geo_types import BuoyStation
from features.tides.models.tide_types import TideSummary
from features.waves.models.ndbc_types import NDBCObservation

class StationLookup(BaseModel):
    """Nearest buoy, its latest row and the best tide summary found for a spot."""
    station: Optional[BuoyStation] = None
    observation: Optional[NDBCObservation] = None
    tide: Optional[TideSummary] = None
