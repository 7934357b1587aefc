from typing import List, Optional

from features.common.exceptions.forecast_exceptions import SourceUnavailableError
from features.stations.services.station_resolver import StationResolver
from features.stations.services.station_service import StationService
from features.tides.models.tide_types import TideTrend
from features.tides.services.tide_providers import BuoyTideProvider, TideQuery
from features.waves.models.ndbc_types import (
    NDBCMetData,
    NDBCObservation,
    NDBCWaveData,
    NDBCWindData
)

from conftest import NOW, hourly_samples


def observation(station_id: str = "46221", tide: Optional[float] = None) -> NDBCObservation:
    return NDBCObservation(
        station_id=station_id,
        wind=NDBCWindData(speed=3.0, direction=280),
        wave=NDBCWaveData(height=1.0668, period=13.0),
        met=NDBCMetData(water_temp=18.0, tide=tide)
    )


class FakeBuoyClient:
    def __init__(self, obs: Optional[NDBCObservation] = None, fail: bool = False):
        self.obs = obs
        self.fail = fail
        self.requested: List[str] = []

    async def get_observation(self, station_id: str) -> NDBCObservation:
        self.requested.append(station_id)
        if self.fail:
            raise SourceUnavailableError("ndbc", "timed out after 15.0s")
        return self.obs


class FakeProvider:
    def __init__(self, name: str, height: Optional[float] = None, fail: bool = False):
        self.name = name
        self.height = height
        self.fail = fail
        self.queries: List[TideQuery] = []

    async def try_fetch(self, query: TideQuery) -> Optional[float]:
        self.queries.append(query)
        if self.fail:
            raise SourceUnavailableError(self.name, "HTTP 503 Service Unavailable")
        return self.height


class FakeHistory:
    def __init__(self, samples=None, fail: bool = False):
        self.samples = samples or []
        self.fail = fail

    async def get_history(self, coordinate, now=None):
        if self.fail:
            raise SourceUnavailableError("worldtides", "HTTP 429 Too Many Requests")
        return self.samples


def rising_history():
    start = int(NOW.timestamp()) - 12 * 3600
    return hourly_samples(start, [1.0 + i * 0.2 for i in range(24)])


def resolver(stations, buoy, providers, history) -> StationResolver:
    return StationResolver(
        station_service=StationService(stations=stations),
        buoy_client=buoy,
        tide_providers=providers,
        history_source=history
    )


async def test_buoy_tide_wins_first(stations, malibu):
    world = FakeProvider("worldtides", height=9.9)
    r = resolver(stations, FakeBuoyClient(observation(tide=2.3)), [BuoyTideProvider(), world], FakeHistory(rising_history()))

    lookup = await r.resolve(malibu.coordinate, malibu.tide_station, now=NOW)

    assert lookup.station.station_id == "46221"
    assert lookup.tide.current_height == 2.3
    assert lookup.tide.source == "ndbc"
    assert lookup.tide.trend == TideTrend.RISING
    assert world.queries == []


async def test_failures_fall_through_in_order(stations, malibu):
    world = FakeProvider("worldtides", fail=True)
    coops = FakeProvider("coops", height=3.4)
    r = resolver(stations, FakeBuoyClient(observation()), [BuoyTideProvider(), world, coops], FakeHistory(rising_history()))

    lookup = await r.resolve(malibu.coordinate, malibu.tide_station, now=NOW)

    assert lookup.tide.current_height == 3.4
    assert lookup.tide.source == "coops"
    # Commercial API is queried by the spot, not the buoy
    assert world.queries[0].coordinate == malibu.coordinate
    assert coops.queries[0].tide_station_id == "9410840"
    assert coops.queries[0].buoy_station_id == "46221"


async def test_all_tide_sources_fail_keeps_buoy_data(stations, malibu):
    r = resolver(
        stations,
        FakeBuoyClient(observation()),
        [BuoyTideProvider(), FakeProvider("worldtides", fail=True), FakeProvider("coops", fail=True)],
        FakeHistory(rising_history())
    )

    lookup = await r.resolve(malibu.coordinate, now=NOW)

    assert lookup.tide is None
    assert lookup.observation.wave.height == 1.0668
    assert lookup.observation.wind.speed == 3.0


async def test_history_failure_degrades_to_unknown_trend(stations, malibu):
    r = resolver(stations, FakeBuoyClient(observation(tide=2.0)), [BuoyTideProvider()], FakeHistory(fail=True))

    lookup = await r.resolve(malibu.coordinate, now=NOW)

    assert lookup.tide.current_height == 2.0
    assert lookup.tide.trend == TideTrend.UNKNOWN
    assert lookup.tide.next_high is None
    assert lookup.tide.range is None


async def test_buoy_feed_failure_is_not_fatal(stations, malibu):
    buoy = FakeBuoyClient(fail=True)
    r = resolver(stations, buoy, [BuoyTideProvider(), FakeProvider("worldtides", height=1.5)], FakeHistory())

    lookup = await r.resolve(malibu.coordinate, now=NOW)

    assert buoy.requested == ["46221"]
    assert lookup.observation is None
    assert lookup.tide.current_height == 1.5


async def test_empty_catalog_still_tries_coordinate_providers(malibu):
    r = resolver([], FakeBuoyClient(), [BuoyTideProvider(), FakeProvider("worldtides", height=1.1)], FakeHistory())

    lookup = await r.resolve(malibu.coordinate, now=NOW)

    assert lookup.station is None
    assert lookup.tide.current_height == 1.1
