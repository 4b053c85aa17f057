import asyncio
import logging
from typing import Any, Dict, List

from supabase import AuthError, Client

from constants import BanDuration
from exceptions import UpstreamFailure
from repositories import users_repository
from schemas import UserCreate, UserResponse, UserUpdate
from services.revalidation_service import revalidate_paths

logger = logging.getLogger("storefront")

USERS_ADMIN_PATH = "/admin/users"
# GoTrue has no "forever", so a century is used. "none" lifts a ban.
BAN_DURATIONS = {
    BanDuration.FOREVER: "876000h",
    BanDuration.DAY: "24h",
}
UNBAN_DURATION = "none"


def _format_user(row: Dict[str, Any]) -> UserResponse:
    metadata = row.get("user_metadata") or {}
    return UserResponse(
        id=row["id"],
        email=row.get("email"),
        first_name=metadata.get("first_name"),
        last_name=metadata.get("last_name"),
        is_admin=bool(metadata.get("is_admin")),
        banned_until=row.get("banned_until"),
        created_at=row.get("created_at"),
        last_sign_in_at=row.get("last_sign_in_at"),
    )


async def list_users(client: Client) -> List[UserResponse]:
    try:
        rows = await asyncio.to_thread(users_repository.list_users, client)
    except AuthError as exc:
        logger.error("Error fetching users for admin: %s", exc)
        raise UpstreamFailure("Could not fetch users.") from exc
    return [_format_user(row) for row in rows]


async def create_user(client: Client, payload: UserCreate) -> UserResponse:
    attributes = {
        "email": payload.email,
        "password": payload.password,
        "user_metadata": {
            "first_name": payload.first_name,
            "last_name": payload.last_name,
            "is_admin": payload.is_admin,
        },
        # Accounts made by an administrator skip the confirmation email.
        "email_confirm": True,
    }
    try:
        row = await asyncio.to_thread(users_repository.create_user, client, attributes)
    except AuthError as exc:
        logger.error("Error creating user %s: %s", payload.email, exc)
        raise UpstreamFailure(str(exc)) from exc
    await revalidate_paths([USERS_ADMIN_PATH])
    return _format_user(row)


async def _update(
    client: Client, user_id: str, attributes: Dict[str, Any], action: str
) -> UserResponse:
    try:
        row = await asyncio.to_thread(users_repository.update_user, client, user_id, attributes)
    except AuthError as exc:
        logger.error("Error %s user %s: %s", action, user_id, exc)
        raise UpstreamFailure(str(exc)) from exc
    await revalidate_paths([USERS_ADMIN_PATH])
    return _format_user(row)


async def update_user(client: Client, user_id: str, payload: UserUpdate) -> UserResponse:
    metadata = {
        key: value
        for key, value in payload.model_dump().items()
        if value is not None
    }
    return await _update(client, user_id, {"user_metadata": metadata}, "updating")


async def ban_user(client: Client, user_id: str, duration: BanDuration) -> UserResponse:
    return await _update(
        client, user_id, {"ban_duration": BAN_DURATIONS[duration]}, "banning"
    )


async def unban_user(client: Client, user_id: str) -> UserResponse:
    return await _update(client, user_id, {"ban_duration": UNBAN_DURATION}, "unbanning")


async def delete_user(client: Client, user_id: str) -> None:
    try:
        await asyncio.to_thread(users_repository.delete_user, client, user_id)
    except AuthError as exc:
        logger.error("Error deleting user %s: %s", user_id, exc)
        raise UpstreamFailure(str(exc)) from exc
    await revalidate_paths([USERS_ADMIN_PATH])
