import json

from features.distribution.models.distribution_types import Cohort
from features.distribution.services.collaborators import JsonUserRepository

from conftest import NOW

USERS = [
    {"id": "a", "email": "a@example.com", "email_verified": True, "spot_ids": ["malibu"]},
    {"id": "b", "email": "b@example.com", "email_verified": True, "premium": True, "spot_ids": ["zuma"]},
    {"id": "c", "email": "c@example.com", "email_verified": False, "spot_ids": ["venice"]},
]


def repo(tmp_path) -> JsonUserRepository:
    path = tmp_path / "users.json"
    path.write_text(json.dumps(USERS))
    return JsonUserRepository(str(path))


async def test_cohorts_hold_verified_users_by_tier(tmp_path):
    users = repo(tmp_path)
    assert [u.id for u in await users.list_cohort(Cohort.REGULAR)] == ["a"]
    assert [u.id for u in await users.list_cohort(Cohort.PREMIUM)] == ["b"]


async def test_missing_file_is_an_empty_cohort(tmp_path):
    assert await JsonUserRepository(str(tmp_path / "nope.json")).list_cohort(Cohort.REGULAR) == []


async def test_record_error_persists(tmp_path):
    users = repo(tmp_path)

    await users.record_error("a", "HTTP 500", NOW)

    user = await JsonUserRepository(str(tmp_path / "users.json")).get_user("a")
    assert user.last_error == "HTTP 500"
    assert user.last_error_at == NOW
    assert (await users.get_user("b")).last_error is None
