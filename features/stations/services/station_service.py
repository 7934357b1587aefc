import json
import logging
from typing import Optional, List
from pathlib import Path

from core.config import settings
from features.common.models.geo_types import BuoyStation, Coordinate
from features.common.utils.geo import nearest_station

logger = logging.getLogger(__name__)

class StationService:
    """Read-only catalog of NDBC buoy stations, loaded once."""

    def __init__(self, stations_file: Optional[Path] = None, stations: Optional[List[BuoyStation]] = None):
        self.stations_file = Path(stations_file or settings.buoy_stations_file)
        self._stations: Optional[List[BuoyStation]] = list(stations) if stations is not None else None

    def _load_stations(self) -> List[BuoyStation]:
        """Load NDBC stations from JSON file."""
        if self._stations is not None:
            return self._stations

        with open(self.stations_file) as f:
            stations_data = json.load(f)
        self._stations = [BuoyStation(**station) for station in stations_data]
        logger.info(f"Loaded {len(self._stations)} buoy stations from {self.stations_file}")
        return self._stations

    def get_stations(self) -> List[BuoyStation]:
        return list(self._load_stations())

    def get_station(self, station_id: str) -> Optional[BuoyStation]:
        """Get station by ID."""
        return next(
            (s for s in self._load_stations() if s.station_id == station_id),
            None
        )

    def nearest(self, point: Coordinate) -> Optional[BuoyStation]:
        """Nearest cataloged station to a coordinate."""
        return nearest_station(point, self._load_stations())
