import asyncio
import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from core.config import settings
from features.common.exceptions.forecast_exceptions import SourceUnavailableError
from features.common.services.http_client import HttpClient
from features.conditions.models.condition_types import NormalizedConditions
from features.distribution.models.distribution_types import Cohort, UserProfile

logger = logging.getLogger(__name__)

NARRATIVE_FIELDS = [
    "main_alert",
    "wave_size",
    "wind",
    "water_temp",
    "vibe",
    "best_time",
    "morning_conditions",
    "afternoon_conditions",
    "gear",
    "skill_focus",
    "daily_challenge",
    "tips",
    "full_report",
]


class NarrativeGenerator(Protocol):
    async def generate(self, conditions: NormalizedConditions, user: UserProfile) -> Dict[str, Any]:
        """Per-field copy for the email plus a 0-100 ``skill_match``."""
        ...


class EmailSender(Protocol):
    async def send(self, to: str, template_id: str, data: Dict[str, Any]) -> None:
        ...


class UserRepository(Protocol):
    async def list_cohort(self, cohort: Cohort) -> List[UserProfile]:
        ...

    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        ...

    async def record_error(self, user_id: str, message: str, at: datetime) -> None:
        ...


class OpenAINarrativeGenerator(HttpClient):
    source_name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, **kwargs):
        kwargs.setdefault("timeout", 60)
        super().__init__(**kwargs)
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model

    def _system_prompt(self) -> str:
        keys = ", ".join(f'"{field}"' for field in NARRATIVE_FIELDS)
        return (
            "You write short, friendly daily surf reports. You receive the current "
            "conditions for one spot as JSON together with the surfer's profile. "
            f"Reply with a JSON object with the keys {keys} and \"skill_match\". "
            "\"tips\" is a list of three strings. \"skill_match\" is an integer from 0 "
            "to 100 rating how well today's conditions suit this surfer's skill level "
            "and board. Units are feet, mph and °F."
        )

    async def generate(self, conditions: NormalizedConditions, user: UserProfile) -> Dict[str, Any]:
        if not self.api_key:
            raise SourceUnavailableError(self.source_name, "no API key configured")

        user_context = {
            "skill_level": user.skill_level,
            "board_type": user.board_type,
        }
        payload = {
            "model": self.model,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": self._system_prompt()},
                {
                    "role": "user",
                    "content": json.dumps({
                        "conditions": conditions.model_dump(mode="json"),
                        "surfer": user_context
                    })
                }
            ]
        }
        data = await self.post_json(
            settings.openai_base_url,
            payload,
            headers={"Authorization": f"Bearer {self.api_key}"}
        )

        try:
            report = json.loads(data["choices"][0]["message"]["content"])
            report["skill_match"] = max(0.0, min(100.0, float(report.get("skill_match", 0))))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise SourceUnavailableError(self.source_name, f"unusable completion: {str(e)}")
        return report


class SendGridEmailSender(HttpClient):
    source_name = "sendgrid"

    def __init__(self, api_key: Optional[str] = None, from_email: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key or settings.sendgrid_api_key
        self.from_email = from_email or settings.sendgrid_from_email

    async def send(self, to: str, template_id: str, data: Dict[str, Any]) -> None:
        if not self.api_key:
            raise SourceUnavailableError(self.source_name, "no API key configured")

        payload = {
            "personalizations": [{"to": [{"email": to}], "dynamic_template_data": data}],
            "from": {"email": self.from_email},
            "template_id": template_id
        }
        await self.post_json(
            settings.sendgrid_base_url,
            payload,
            headers={"Authorization": f"Bearer {self.api_key}"}
        )


class JsonUserRepository:
    """User profiles kept in a JSON file; stands in for the account store."""

    def __init__(self, users_file: Optional[str] = None):
        self.users_file = Path(users_file or settings.users_file)
        self._lock = asyncio.Lock()

    def _load(self) -> List[UserProfile]:
        if not self.users_file.exists():
            return []
        with open(self.users_file) as f:
            return [UserProfile(**user) for user in json.load(f)]

    def _save(self, users: List[UserProfile]) -> None:
        tmp_path = self.users_file.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump([u.model_dump(mode="json") for u in users], f, indent=2)
        os.replace(tmp_path, self.users_file)

    async def list_cohort(self, cohort: Cohort) -> List[UserProfile]:
        """Verified users on the cohort's tier."""
        wants_premium = cohort == Cohort.PREMIUM
        return [
            u for u in self._load()
            if u.email_verified and u.premium == wants_premium
        ]

    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        return next((u for u in self._load() if u.id == user_id), None)

    async def record_error(self, user_id: str, message: str, at: datetime) -> None:
        async with self._lock:
            users = self._load()
            for i, user in enumerate(users):
                if user.id == user_id:
                    users[i] = user.model_copy(update={"last_error": message, "last_error_at": at})
            self._save(users)
