import asyncio

import pytest

from constants import BanDuration
from exceptions import UpstreamFailure
from schemas import UserCreate, UserUpdate
from services import users_service


def test_create_user_confirms_email_and_stores_metadata(supabase):
    payload = UserCreate(
        email="meera@example.com",
        password="secret1",
        first_name="Meera",
        last_name="Iyer",
        is_admin=True,
    )

    user = asyncio.run(users_service.create_user(supabase, payload))

    assert user.email == "meera@example.com"
    assert user.is_admin is True
    (_, attributes), = supabase.auth_requests
    assert attributes["email_confirm"] is True
    assert attributes["user_metadata"] == {
        "first_name": "Meera",
        "last_name": "Iyer",
        "is_admin": True,
    }


def test_update_only_sends_given_fields(supabase):
    supabase.auth.admin.add(
        "u1", user_metadata={"first_name": "Asha", "last_name": "Rao", "is_admin": False}
    )

    user = asyncio.run(
        users_service.update_user(supabase, "u1", UserUpdate(last_name="Kulkarni"))
    )

    assert supabase.auth_requests == [
        ("update_user_by_id", {"user_metadata": {"last_name": "Kulkarni"}})
    ]
    assert user.first_name == "Asha"
    assert user.last_name == "Kulkarni"


@pytest.mark.parametrize(
    "duration, sent",
    [(BanDuration.FOREVER, "876000h"), (BanDuration.DAY, "24h")],
)
def test_ban_durations(supabase, duration, sent):
    supabase.auth.admin.add("u1")
    asyncio.run(users_service.ban_user(supabase, "u1", duration))
    assert supabase.auth_requests == [("update_user_by_id", {"ban_duration": sent})]


def test_unban_clears_ban(supabase):
    supabase.auth.admin.add("u1", banned_until="2124-01-01T00:00:00+00:00")
    user = asyncio.run(users_service.unban_user(supabase, "u1"))
    assert supabase.auth_requests == [("update_user_by_id", {"ban_duration": "none"})]
    assert user.banned_until is None


def test_list_failure_is_upstream(supabase):
    supabase.failures.add(("auth", "list_users"))
    with pytest.raises(UpstreamFailure):
        asyncio.run(users_service.list_users(supabase))


def test_delete_user(supabase):
    supabase.auth.admin.add("u1")
    asyncio.run(users_service.delete_user(supabase, "u1"))
    assert supabase.auth.admin.users == {}
    with pytest.raises(UpstreamFailure):
        asyncio.run(users_service.delete_user(supabase, "u1"))
