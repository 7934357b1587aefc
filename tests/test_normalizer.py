from features.conditions.services.normalizer import (
    BUOY_PRECEDENCE,
    merge_sources,
    normalize
)
from features.forecast.models.forecast_types import MarineSample, WeatherSample
from features.stations.models.station_types import StationLookup
from features.waves.models.ndbc_types import (
    NDBCMetData,
    NDBCObservation,
    NDBCWaveData,
    NDBCWindData
)

from conftest import NOW, make_tide


def marine(**hourly) -> MarineSample:
    base = {
        "wave_height": [None] * 8 + [1.2192],      # 4.0 ft at 08:00
        "swell_wave_height": [None] * 8 + [0.9],
        "swell_wave_period": [None] * 8 + [9.0],
        "swell_wave_direction": [None] * 8 + [250],
        "sea_surface_temperature": [None] * 8 + [16.0],
    }
    base.update(hourly)
    return MarineSample(hourly=base, daily={"wave_height_max": [1.8, 2.5]})


def weather() -> WeatherSample:
    return WeatherSample(
        hourly={
            "temperature_2m": [None] * 8 + [20.0],
            "wind_speed_10m": [None] * 8 + [12.0],
            "wind_direction_10m": [None] * 8 + [300],
            "wind_gusts_10m": [None] * 8 + [20.0],
            "cloud_cover": [None] * 8 + [0],
            "precipitation": [None] * 8 + [0.0],
        },
        daily={"temperature_2m_max": [24.0, 30.0], "temperature_2m_min": [15.0, 10.0]}
    )


def buoy(height=1.0668, period=13.0, water_temp=18.0) -> StationLookup:
    return StationLookup(
        observation=NDBCObservation(
            station_id="46221",
            wind=NDBCWindData(speed=3.0, direction=270, gust=5.0),
            wave=NDBCWaveData(height=height, period=period, direction=260),
            met=NDBCMetData(water_temp=water_temp)
        ),
        tide=make_tide()
    )


def test_buoy_wave_height_beats_marine_model(malibu):
    conditions = normalize(malibu, marine(), weather(), buoy(), hour=8, generated_at=NOW)

    assert conditions.wave_height == 3.5
    assert conditions.swell_period == 13.0
    assert conditions.water_temperature == 64
    assert conditions.sources["wave_height"] == "buoy"


def test_model_is_fallback_when_buoy_has_no_value(malibu):
    conditions = normalize(malibu, marine(), weather(), buoy(height=None, period=None, water_temp=None), hour=8)

    assert conditions.wave_height == 4.0
    assert conditions.swell_period == 9.0
    assert conditions.water_temperature == 61
    assert conditions.sources["wave_height"] == "model"


def test_model_wins_for_wind_and_buoy_fills_gaps(malibu):
    conditions = normalize(malibu, marine(), weather(), buoy(), hour=8)
    assert conditions.wind_speed == 7.5  # 12 km/h from the weather model
    assert conditions.sources["wind_speed"] == "model"

    no_weather = normalize(malibu, marine(), None, buoy(), hour=8)
    assert no_weather.wind_speed == 6.7  # 3 m/s from the buoy
    assert no_weather.sources["wind_speed"] == "buoy"


def test_daily_aggregates_read_today(malibu):
    conditions = normalize(malibu, marine(), weather(), None, hour=8)
    assert conditions.max_wave_height == 5.9
    assert conditions.max_temperature == 75
    assert conditions.min_temperature == 59


def test_missing_fields_stay_none_and_zero_is_kept(malibu):
    flat = marine(wave_height=[None] * 8 + [0.0])
    conditions = normalize(malibu, flat, weather(), None, hour=8)

    assert conditions.wave_height == 0
    assert conditions.cloud_cover == 0
    assert conditions.precipitation == 0
    assert conditions.precipitation_probability is None
    assert conditions.sunrise is None
    assert conditions.tide is None


def test_hour_out_of_range_yields_none(malibu):
    conditions = normalize(malibu, marine(), weather(), None, hour=23)
    assert conditions.wave_height is None
    assert conditions.max_wave_height == 5.9


def test_nothing_at_all(malibu):
    conditions = normalize(malibu, None, None, None, hour=8)
    assert conditions.wave_height is None
    assert conditions.sources == {}


def test_merge_policy_is_explicit():
    assert BUOY_PRECEDENCE == {"wave_height", "swell_period", "water_temperature"}

    merged, sources = merge_sources(
        {"wave_height": 4.0, "wind_speed": 10.0, "swell_period": None},
        {"wave_height": 3.5, "wind_speed": 6.0, "swell_period": None}
    )
    assert merged == {"wave_height": 3.5, "wind_speed": 10.0, "swell_period": None}
    assert sources == {"wave_height": "buoy", "wind_speed": "model"}
