from fastapi import Depends, Header, HTTPException, status
import httpx

from config import Settings, settings


async def _fetch_user(access_token: str, config: Settings = settings) -> dict:
    headers = {
        "Authorization": f"Bearer {access_token}",
        "apikey": config.supabase_service_role_key,
    }
    url = f"{config.supabase_url}/auth/v1/user"
    async with httpx.AsyncClient(timeout=10) as client:
        response = await client.get(url, headers=headers)
    if response.status_code != 200:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth token"
        )
    return response.json()


def is_admin(user: dict) -> bool:
    metadata = user.get("user_metadata") or {}
    return bool(metadata.get("is_admin"))


async def get_current_user(
    authorization: str | None = Header(default=None, convert_underscores=False),
) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing auth token"
        )
    token = authorization.split(" ", 1)[1]
    user = await _fetch_user(token)
    if not user.get("id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user profile"
        )
    return user


async def get_current_user_id(user: dict = Depends(get_current_user)) -> str:
    return user["id"]


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Administrator access required"
        )
    return user
