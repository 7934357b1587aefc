"""Merge marine model, weather model and buoy data into NormalizedConditions.

Each provider has its own parser returning display-unit fields. A single
merge step then decides per field which source wins:

* fields in BUOY_PRECEDENCE take the buoy value whenever the buoy has one,
  because a direct station observation beats a gridded model;
* every other field takes the model value and only falls back to the buoy.

None never becomes 0. A flat 0 ft reading is a real value.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from features.common.models.geo_types import SurfSpot
from features.common.utils.conversions import UnitConversions
from features.conditions.models.condition_types import NormalizedConditions
from features.forecast.models.forecast_types import MarineSample, WeatherSample
from features.stations.models.station_types import StationLookup
from features.waves.models.ndbc_types import NDBCObservation

BUOY_PRECEDENCE = frozenset({"wave_height", "swell_period", "water_temperature"})

SOURCE_BUOY = "buoy"
SOURCE_MODEL = "model"


def parse_marine(marine: Optional[MarineSample], hour: int) -> Dict[str, Any]:
    if marine is None:
        return {}
    return {
        "wave_height": UnitConversions.meters_to_feet(marine.hourly_value("wave_height", hour)),
        "swell_height": UnitConversions.meters_to_feet(marine.hourly_value("swell_wave_height", hour)),
        "swell_period": marine.hourly_value("swell_wave_period", hour),
        "swell_direction": marine.hourly_value("swell_wave_direction", hour),
        "water_temperature": UnitConversions.celsius_to_fahrenheit(
            marine.hourly_value("sea_surface_temperature", hour)
        ),
        "max_wave_height": UnitConversions.meters_to_feet(marine.today("wave_height_max")),
    }


def parse_weather(weather: Optional[WeatherSample], hour: int) -> Dict[str, Any]:
    if weather is None:
        return {}
    return {
        "air_temperature": UnitConversions.celsius_to_fahrenheit(weather.hourly_value("temperature_2m", hour)),
        "wind_speed": UnitConversions.kmh_to_mph(weather.hourly_value("wind_speed_10m", hour)),
        "wind_direction": weather.hourly_value("wind_direction_10m", hour),
        "wind_gust": UnitConversions.kmh_to_mph(weather.hourly_value("wind_gusts_10m", hour)),
        "cloud_cover": weather.hourly_value("cloud_cover", hour),
        "precipitation": UnitConversions.mm_to_inches(weather.hourly_value("precipitation", hour)),
        "precipitation_probability": weather.hourly_value("precipitation_probability", hour),
        "max_temperature": UnitConversions.celsius_to_fahrenheit(weather.today("temperature_2m_max")),
        "min_temperature": UnitConversions.celsius_to_fahrenheit(weather.today("temperature_2m_min")),
        "max_wind_speed": UnitConversions.kmh_to_mph(weather.today("wind_speed_10m_max")),
        "sunrise": weather.today("sunrise"),
        "sunset": weather.today("sunset"),
    }


def parse_buoy(observation: Optional[NDBCObservation]) -> Dict[str, Any]:
    if observation is None:
        return {}
    return {
        "wave_height": UnitConversions.meters_to_feet(observation.wave.height),
        "swell_period": observation.wave.period,
        "swell_direction": observation.wave.direction,
        "water_temperature": UnitConversions.celsius_to_fahrenheit(observation.met.water_temp),
        "air_temperature": UnitConversions.celsius_to_fahrenheit(observation.met.air_temp),
        "wind_speed": UnitConversions.ms_to_mph(observation.wind.speed),
        "wind_direction": observation.wind.direction,
        "wind_gust": UnitConversions.ms_to_mph(observation.wind.gust),
    }


def merge_sources(
    model: Dict[str, Any],
    buoy: Dict[str, Any]
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """Apply the precedence policy field by field.

    Returns the merged values and, for every non-null field, which source
    supplied it.
    """
    merged: Dict[str, Any] = {}
    sources: Dict[str, str] = {}
    for field in set(model) | set(buoy):
        model_value = model.get(field)
        buoy_value = buoy.get(field)
        if field in BUOY_PRECEDENCE:
            order = ((buoy_value, SOURCE_BUOY), (model_value, SOURCE_MODEL))
        else:
            order = ((model_value, SOURCE_MODEL), (buoy_value, SOURCE_BUOY))

        merged[field] = None
        for value, source in order:
            if value is not None:
                merged[field] = value
                sources[field] = source
                break
    return merged, sources


def normalize(
    spot: SurfSpot,
    marine: Optional[MarineSample],
    weather: Optional[WeatherSample],
    lookup: Optional[StationLookup],
    hour: int,
    generated_at: Optional[datetime] = None
) -> NormalizedConditions:
    """Build the canonical snapshot for a spot at a local hour of day (0-23)."""
    model_fields = {**parse_marine(marine, hour), **parse_weather(weather, hour)}
    buoy_fields = parse_buoy(lookup.observation if lookup else None)
    merged, sources = merge_sources(model_fields, buoy_fields)

    return NormalizedConditions(
        spot_id=spot.id,
        spot_name=spot.name,
        region=spot.region,
        generated_at=generated_at or datetime.now(timezone.utc),
        hour=hour,
        buoy_station_id=lookup.station.station_id if lookup and lookup.station else None,
        tide=lookup.tide if lookup else None,
        sources=sources,
        **merged
    )
