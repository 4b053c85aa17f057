import asyncio
import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from constants import OrderStatus
from exceptions import NotFoundError, UpstreamFailure
from money import format_price
from repositories import notifications_repository
from schemas import NotificationListResponse, NotificationResponse

logger = logging.getLogger("storefront")

CUSTOMER_TITLE = "Order Status Updated"
NEW_ORDER_TITLE = "New Order Received!"
ADMIN_ACTION_TITLE = "Action Required: Order Update"

STATUS_SUFFIXES = {
    OrderStatus.SHIPPED: " It is on its way to you!",
    OrderStatus.DELIVERED: " Thank you for shopping with us!",
}


def _record(user_id: str, order_id: str, title: str, message: str) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "order_id": order_id,
        "title": title,
        "message": message,
    }


def customer_status_message(order_id: str, status: OrderStatus) -> str:
    if status == OrderStatus.CANCELLED:
        return f"Your order #{order_id} has been cancelled."
    message = f"Your order #{order_id} is now {status.value}."
    return message + STATUS_SUFFIXES.get(status, "")


def build_new_order_notifications(
    order_id: str, total: float, admin_ids: List[str]
) -> List[Dict[str, Any]]:
    message = (
        f"A new order (#{order_id}) has been placed for a total of {format_price(total)}."
    )
    return [_record(admin_id, order_id, NEW_ORDER_TITLE, message) for admin_id in admin_ids]


def build_status_notifications(
    order_id: str,
    status: OrderStatus,
    customer_id: Optional[str],
    admin_ids: List[str],
) -> List[Dict[str, Any]]:
    """Rows to insert for a status change.

    Cancellation requests go to administrators only; every other status goes
    to the owning customer only.
    """
    if status == OrderStatus.CANCELLATION_PENDING:
        message = f'Order #{order_id} has a status of "{status.value}".'
        return [
            _record(admin_id, order_id, ADMIN_ACTION_TITLE, message)
            for admin_id in admin_ids
        ]
    if not customer_id:
        return []
    return [
        _record(
            customer_id,
            order_id,
            CUSTOMER_TITLE,
            customer_status_message(order_id, status),
        )
    ]


async def _fetch_admin_ids(client: Client) -> Optional[List[str]]:
    try:
        return await asyncio.to_thread(notifications_repository.fetch_admin_user_ids, client)
    except Exception:
        logger.exception("Error fetching admin user IDs")
        return None


async def _insert(client: Client, records: List[Dict[str, Any]]) -> int:
    if not records:
        return 0
    try:
        await asyncio.to_thread(notifications_repository.insert_notifications, client, records)
    except Exception:
        logger.exception("Error creating %d notification(s)", len(records))
        return 0
    return len(records)


async def notify_order_placed(client: Client, order_id: str, total: float) -> int:
    admin_ids = await _fetch_admin_ids(client)
    if not admin_ids:
        return 0
    return await _insert(client, build_new_order_notifications(order_id, total, admin_ids))


async def notify_status_change(
    client: Client,
    order_id: str,
    status: OrderStatus,
    customer_id: Optional[str],
) -> int:
    """Best-effort fan-out; returns how many rows were written."""
    admin_ids: List[str] = []
    if status == OrderStatus.CANCELLATION_PENDING:
        admin_ids = await _fetch_admin_ids(client) or []
    records = build_status_notifications(order_id, status, customer_id, admin_ids)
    return await _insert(client, records)


async def list_notifications(
    client: Client, user_id: str, admin: bool = False
) -> NotificationListResponse:
    """The caller's newest notifications; administrators read the shared admin inbox."""
    try:
        if admin:
            rows = await asyncio.to_thread(
                notifications_repository.fetch_admin_notifications, client
            )
        else:
            rows = await asyncio.to_thread(
                notifications_repository.fetch_user_notifications, client, user_id
            )
    except APIError as exc:
        raise UpstreamFailure(f"Could not fetch notifications: {exc.message}") from exc
    items = [NotificationResponse(**row) for row in rows]
    unread = sum(1 for item in items if not item.is_read)
    return NotificationListResponse(items=items, unread_count=unread)


async def mark_notification_read(
    client: Client, user_id: str, notification_id: int
) -> NotificationResponse:
    try:
        row = await asyncio.to_thread(
            notifications_repository.mark_read, client, user_id, notification_id
        )
    except APIError as exc:
        raise UpstreamFailure(f"Could not update notification: {exc.message}") from exc
    if not row:
        raise NotFoundError(f"Notification {notification_id} not found")
    return NotificationResponse(**row)


async def mark_all_notifications_read(client: Client, user_id: str) -> int:
    try:
        return await asyncio.to_thread(notifications_repository.mark_all_read, client, user_id)
    except APIError as exc:
        raise UpstreamFailure(
            f"Could not mark all notifications as read: {exc.message}"
        ) from exc
