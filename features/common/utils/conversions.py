from typing import Optional

FEET_PER_METER = 3.28084

class UnitConversions:
    """Centralized utility for unit conversions across the application.

    Every conversion passes None through untouched. A missing reading must
    never turn into 0.
    """

    @staticmethod
    def meters_to_feet(meters: Optional[float]) -> Optional[float]:
        """Convert meters to feet."""
        if meters is None:
            return None
        return round(meters * FEET_PER_METER, 1)

    @staticmethod
    def kmh_to_mph(kmh: Optional[float]) -> Optional[float]:
        """Convert kilometers per hour to miles per hour."""
        if kmh is None:
            return None
        return round(kmh * 0.621371, 1)

    @staticmethod
    def ms_to_mph(ms: Optional[float]) -> Optional[float]:
        """Convert meters per second to miles per hour."""
        if ms is None:
            return None
        return round(ms * 2.23694, 1)  # 1 m/s = 2.23694 mph

    @staticmethod
    def celsius_to_fahrenheit(celsius: Optional[float]) -> Optional[int]:
        """Convert Celsius to whole degrees Fahrenheit."""
        if celsius is None:
            return None
        return round(celsius * 9 / 5 + 32)

    @staticmethod
    def mm_to_inches(mm: Optional[float]) -> Optional[float]:
        """Convert millimeters to inches."""
        if mm is None:
            return None
        return round(mm / 25.4, 2)
