from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from auth import get_current_user, get_current_user_id, is_admin
from exceptions import NotFoundError, UpstreamFailure
from schemas import (
    NotificationListResponse,
    NotificationResponse,
    NotificationsReadAllResponse,
)
from services import notifications_service
from supabase_client import get_supabase

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    user: dict = Depends(get_current_user),
    client: Client = Depends(get_supabase),
) -> NotificationListResponse:
    try:
        return await notifications_service.list_notifications(
            client, user["id"], admin=is_admin(user)
        )
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.post("/read-all", response_model=NotificationsReadAllResponse)
async def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    client: Client = Depends(get_supabase),
) -> NotificationsReadAllResponse:
    try:
        updated = await notifications_service.mark_all_notifications_read(client, user_id)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return NotificationsReadAllResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    user_id: str = Depends(get_current_user_id),
    client: Client = Depends(get_supabase),
) -> NotificationResponse:
    try:
        return await notifications_service.mark_notification_read(
            client, user_id, notification_id
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
