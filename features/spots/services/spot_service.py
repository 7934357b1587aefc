import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from core.config import settings
from features.common.exceptions.forecast_exceptions import UnknownSpotError
from features.common.models.geo_types import SurfSpot

logger = logging.getLogger(__name__)

class SpotService:
    """Resolves named surf spots to coordinates from the static catalog."""

    def __init__(self, spots_file: Optional[Path] = None):
        self.spots_file = Path(spots_file or settings.surf_spots_file)
        self._spots: Optional[Dict[str, SurfSpot]] = None

    def _load_spots(self) -> Dict[str, SurfSpot]:
        """Load surf spots from JSON file."""
        if self._spots is not None:
            return self._spots

        with open(self.spots_file) as f:
            spots_data = json.load(f)
        self._spots = {spot["id"]: SurfSpot(**spot) for spot in spots_data}
        logger.info(f"Loaded {len(self._spots)} surf spots from {self.spots_file}")
        return self._spots

    def get_spots(self) -> List[SurfSpot]:
        return list(self._load_spots().values())

    def get_spot(self, spot_id: str) -> SurfSpot:
        """Get spot by id or by case-insensitive name."""
        spots = self._load_spots()
        spot = spots.get(spot_id)
        if spot:
            return spot

        wanted = spot_id.strip().lower()
        spot = next((s for s in spots.values() if s.name.lower() == wanted), None)
        if not spot:
            raise UnknownSpotError(f"Spot {spot_id} not found")
        return spot
