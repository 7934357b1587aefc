import math
from typing import Iterable, Optional

from features.common.models.geo_types import BuoyStation, Coordinate

EARTH_RADIUS_KM = 6371


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two points using the Haversine formula."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def nearest_station(point: Coordinate, catalog: Iterable[BuoyStation]) -> Optional[BuoyStation]:
    """Closest station to point, or None for an empty catalog.

    Ties go to the station listed first.
    """
    nearest = None
    min_distance = math.inf
    for station in catalog:
        distance = distance_km(point, station.coordinate)
        if distance < min_distance:
            min_distance = distance
            nearest = station
    return nearest
