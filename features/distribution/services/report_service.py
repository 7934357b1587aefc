import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.config import settings
from features.common.exceptions.forecast_exceptions import (
    ReportSkippedError,
    SourceUnavailableError,
    UnknownSpotError,
    UserReportError
)
from features.common.models.geo_types import SurfSpot
from features.common.services.rate_limiter import RateLimiter
from features.conditions.models.condition_types import RankedSelection, ScoredSpot
from features.conditions.services.conditions_service import ConditionsService
from features.distribution.models.distribution_types import UserProfile
from features.distribution.services.collaborators import EmailSender, NarrativeGenerator
from features.scoring.services.spot_scorer import SpotScorer
from features.spots.services.spot_service import SpotService

logger = logging.getLogger(__name__)


class ReportService:
    """Builds and sends one user's daily report."""

    def __init__(
        self,
        spot_service: SpotService,
        conditions_service: ConditionsService,
        scorer: SpotScorer,
        narrative: NarrativeGenerator,
        email_sender: EmailSender,
        rate_limiter: RateLimiter,
        template_id: Optional[str] = None,
        premium_spot_limit: Optional[int] = None
    ):
        self.spot_service = spot_service
        self.conditions_service = conditions_service
        self.scorer = scorer
        self.narrative = narrative
        self.email_sender = email_sender
        self.rate_limiter = rate_limiter
        self.template_id = template_id if template_id is not None else settings.sendgrid_template_id
        self.premium_spot_limit = premium_spot_limit or settings.premium_spot_limit

    def _spots_for(self, user: UserProfile) -> List[SurfSpot]:
        limit = self.premium_spot_limit if user.premium else 1
        spots = []
        for spot_id in user.spot_ids[:limit]:
            try:
                spots.append(self.spot_service.get_spot(spot_id))
            except UnknownSpotError as e:
                logger.warning(f"User {user.id} prefers unknown spot {spot_id}: {str(e)}")
        return spots

    async def _score_spot(self, spot: SurfSpot, user: UserProfile, now: datetime) -> ScoredSpot:
        conditions = await self.conditions_service.get_spot_conditions(spot, now=now)
        report = await self.narrative.generate(conditions, user)
        return self.scorer.build(conditions, report.get("skill_match", 0), report)

    async def rank_spots(self, user: UserProfile, now: Optional[datetime] = None) -> Optional[RankedSelection]:
        """Fetch every preferred spot concurrently and rank what succeeds.

        One spot failing never cancels its siblings. When every launched spot
        fails, ReportSkippedError carries the collected failures.
        """
        now = now or datetime.now(timezone.utc)
        spots = self._spots_for(user)
        if not spots:
            return None

        results = await asyncio.gather(
            *(self._score_spot(spot, user, now) for spot in spots),
            return_exceptions=True
        )
        candidates = []
        failures = []
        for spot, result in zip(spots, results):
            if isinstance(result, Exception):
                logger.warning(f"Skipping {spot.name} for user {user.id}: {str(result)}")
                failures.append(f"{spot.name}: {str(result)}")
                continue
            candidates.append(result)

        if not candidates:
            raise ReportSkippedError("; ".join(failures))
        return self.scorer.select_top(candidates)

    def build_payload(
        self,
        user: UserProfile,
        selection: RankedSelection,
        business_date: str
    ) -> Dict[str, Any]:
        """Flat key/value template data for the email."""
        featured = selection.featured
        conditions = featured.conditions
        tide = conditions.tide
        day = datetime.strptime(business_date, "%Y-%m-%d")

        payload: Dict[str, Any] = {
            "first_name": user.first_name or "",
            "location": conditions.spot_name,
            "date": f"{day:%B} {day.day}",
            "score": featured.score,
            "skill_match": featured.skill_match,
            "wave_height": conditions.wave_height,
            "swell_period": conditions.swell_period,
            "swell_direction": conditions.swell_direction,
            "wind_speed": conditions.wind_speed,
            "wind_direction": conditions.wind_direction,
            "air_temperature": conditions.air_temperature,
            "water_temperature": conditions.water_temperature,
            "tide_trend": tide.trend.value if tide else None,
            "tide_height": tide.current_height if tide else None,
        }
        for key, value in featured.report.items():
            if key == "tips" and isinstance(value, list):
                for i, tip in enumerate(value[:3], start=1):
                    payload[f"tip_{i}"] = tip
            elif key != "skill_match":
                payload[key] = value

        for i, spot in enumerate(selection.additional, start=2):
            payload[f"spot_{i}_name"] = spot.conditions.spot_name
            payload[f"spot_{i}_score"] = spot.score
            payload[f"spot_{i}_wave_height"] = spot.conditions.wave_height
            payload[f"spot_{i}_wind_speed"] = spot.conditions.wind_speed
            for key, value in spot.report.items():
                payload[f"spot_{i}_{key}"] = value
        return payload

    async def deliver(self, user: UserProfile, business_date: str, now: Optional[datetime] = None) -> bool:
        """Send today's report.

        False when the user has no usable spot preference. Raises
        ReportSkippedError when every preferred spot failed to load.
        """
        if not user.spot_ids:
            logger.info(f"User {user.id} has no spot preference, skipping")
            return False

        selection = await self.rank_spots(user, now)
        if selection is None:
            logger.warning(f"No usable spot reports for user {user.id}, skipping")
            return False

        payload = self.build_payload(user, selection, business_date)
        await self.rate_limiter.limit()
        try:
            await self.email_sender.send(user.email, self.template_id, payload)
        except SourceUnavailableError as e:
            raise UserReportError(f"Email to user {user.id} failed: {str(e)}") from e
        logger.info(f"📧 Sent {selection.featured.conditions.spot_name} report to user {user.id}")
        return True
