"""Shared fixtures and fakes. No test touches the network."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from core.cache import AiocacheStore
from features.common.exceptions.forecast_exceptions import SourceUnavailableError
from features.common.models.geo_types import BuoyStation, SurfSpot
from features.common.services.rate_limiter import RateLimiter
from features.conditions.models.condition_types import NormalizedConditions
from features.distribution.models.distribution_types import Cohort, UserProfile
from features.spots.services.spot_service import SpotService
from features.tides.models.tide_types import TideRange, TideSample, TideSummary, TideTrend

NOW = datetime(2025, 6, 1, 15, 0, tzinfo=timezone.utc)  # 08:00 in Los Angeles


async def no_sleep(_seconds: float) -> None:
    return None


def make_conditions(spot_id: str = "malibu", **fields) -> NormalizedConditions:
    data: Dict[str, Any] = {
        "spot_id": spot_id,
        "spot_name": spot_id.replace("-", " ").title(),
        "generated_at": NOW,
        "hour": 8,
    }
    data.update(fields)
    return NormalizedConditions(**data)


def make_tide(trend: TideTrend = TideTrend.RISING, tide_range: Optional[float] = 3.0) -> TideSummary:
    return TideSummary(
        current_height=2.0,
        trend=trend,
        range=TideRange(min=0.0, max=tide_range, range=tide_range) if tide_range is not None else None
    )


def hourly_samples(start: int, heights: List[float], step: int = 3600) -> List[TideSample]:
    return [TideSample(timestamp=start + i * step, height=h) for i, h in enumerate(heights)]


class FakeConditionsService:
    def __init__(self, conditions: Dict[str, NormalizedConditions], failing: Optional[set] = None):
        self.conditions = conditions
        self.failing = failing or set()
        self.calls: List[str] = []

    async def get_spot_conditions(self, spot: SurfSpot, hour=None, now=None) -> NormalizedConditions:
        self.calls.append(spot.id)
        if spot.id in self.failing:
            raise SourceUnavailableError("conditions", f"no data for {spot.id}")
        return self.conditions[spot.id]


class FakeNarrative:
    def __init__(self, skill_match: Optional[Dict[str, float]] = None, default: float = 50):
        self.skill_match = skill_match or {}
        self.default = default

    async def generate(self, conditions: NormalizedConditions, user: UserProfile) -> Dict[str, Any]:
        return {
            "main_alert": f"Fun waves at {conditions.spot_name}",
            "wave_size": "waist to chest",
            "wind": "light offshore",
            "best_time": "7am",
            "vibe": "mellow",
            "morning_conditions": "clean",
            "tips": ["Paddle out early", "Watch the rip", "Bring a 3/2"],
            "skill_match": self.skill_match.get(conditions.spot_id, self.default),
        }


class FakeEmailSender:
    def __init__(self, failing_emails: Optional[set] = None):
        self.sent: List[Dict[str, Any]] = []
        self.failing_emails = failing_emails or set()

    async def send(self, to: str, template_id: str, data: Dict[str, Any]) -> None:
        if to in self.failing_emails:
            raise SourceUnavailableError("sendgrid", "HTTP 500 Internal Server Error")
        self.sent.append({"to": to, "template_id": template_id, "data": data})


class FakeUserRepository:
    def __init__(self, users: List[UserProfile], fail_listing: bool = False):
        self.users = {u.id: u for u in users}
        self.fail_listing = fail_listing
        self.errors: Dict[str, str] = {}

    async def list_cohort(self, cohort: Cohort) -> List[UserProfile]:
        if self.fail_listing:
            raise ConnectionError("user store unreachable")
        wants_premium = cohort == Cohort.PREMIUM
        return [u for u in self.users.values() if u.email_verified and u.premium == wants_premium]

    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        return self.users.get(user_id)

    async def record_error(self, user_id: str, message: str, at: datetime) -> None:
        self.errors[user_id] = message


@pytest.fixture
def store() -> AiocacheStore:
    return AiocacheStore(namespace=f"test-{uuid.uuid4().hex}")


@pytest.fixture
def rate_limiter(store) -> RateLimiter:
    return RateLimiter(store, key="email_rate:test", sleep=no_sleep)


@pytest.fixture
def stations() -> List[BuoyStation]:
    return [
        BuoyStation(id="46221", name="Santa Monica Bay, CA", latitude=33.855, longitude=-118.633),
        BuoyStation(id="46222", name="San Pedro, CA", latitude=33.618, longitude=-118.317),
        BuoyStation(id="46254", name="SCRIPPS Nearshore, CA", latitude=32.868, longitude=-117.267),
        BuoyStation(id="46026", name="San Francisco, CA", latitude=37.754, longitude=-122.839),
    ]


@pytest.fixture
def malibu() -> SurfSpot:
    return SurfSpot(
        id="malibu",
        name="Malibu",
        region="Los Angeles",
        latitude=34.0370,
        longitude=-118.6784,
        tide_station="9410840"
    )


@pytest.fixture
def spot_service(tmp_path) -> SpotService:
    spots = [
        {"id": "malibu", "name": "Malibu", "region": "Los Angeles", "latitude": 34.0370, "longitude": -118.6784},
        {"id": "zuma", "name": "Zuma", "region": "Los Angeles", "latitude": 34.0153, "longitude": -118.8228},
        {"id": "venice", "name": "Venice", "region": "Los Angeles", "latitude": 33.9850, "longitude": -118.4695},
        {"id": "el-porto", "name": "El Porto", "region": "South Bay", "latitude": 33.8947, "longitude": -118.4204},
        {"id": "trestles", "name": "Trestles", "region": "Orange County", "latitude": 33.3825, "longitude": -117.5889},
        {"id": "blacks", "name": "Blacks", "region": "San Diego", "latitude": 32.8894, "longitude": -117.2536},
    ]
    path = tmp_path / "surf_spots.json"
    path.write_text(json.dumps(spots))
    return SpotService(spots_file=path)
