from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """WGS84 position in decimal degrees."""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class BuoyStation(BaseModel):
    """Entry in the static NDBC station catalog."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    station_id: str = Field(alias="id")
    name: str
    latitude: float
    longitude: float

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class SurfSpot(BaseModel):
    """Named surf spot a user can subscribe to."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    region: Optional[str] = None
    latitude: float
    longitude: float
    tide_station: Optional[str] = None  # NOAA CO-OPS station id

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)
