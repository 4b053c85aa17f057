import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from constants import CUSTOMER_CANCELLATION, OrderStatus
from exceptions import OrderNotFoundError, UpstreamFailure, ValidationFailure
from money import to_amount
from repositories import orders_repository
from schemas import OrderCreate, OrderResponse
from services import notifications_service
from services.revalidation_service import revalidate_paths

logger = logging.getLogger("storefront")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_status_history(history: Any) -> List[Dict[str, Any]]:
    """Older rows keep the history as a JSON string; anything unreadable is empty."""
    if isinstance(history, list):
        return history
    if isinstance(history, str):
        try:
            parsed = json.loads(history)
        except ValueError:
            return []
        return parsed if isinstance(parsed, list) else []
    return []


def history_entry(status: OrderStatus, comment: Optional[str] = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"status": status.value, "date": _now_iso()}
    if comment:
        entry["comment"] = comment
    return entry


def _format_row(row: Dict[str, Any]) -> OrderResponse:
    return OrderResponse(
        order_id=str(row["order_id"]),
        user_id=row.get("user_id"),
        order_date=row.get("order_date"),
        order_status=row["order_status"],
        total=to_amount(row.get("total")),
        cart_items=row.get("cart_items") or [],
        shipping_details=row.get("shipping_details"),
        payment_reference_id=row.get("payment_reference_id"),
        order_summary=row.get("order_summary"),
        status_history=parse_status_history(row.get("status_history")),
    )


def order_paths(order_id: str) -> List[str]:
    return [
        f"/account/orders/{order_id}",
        "/admin/orders",
        f"/admin/orders/{order_id}",
    ]


async def create_order(client: Client, user_id: str, payload: OrderCreate) -> OrderResponse:
    record = {
        "user_id": user_id,
        "order_status": OrderStatus.PLACED.value,
        "total": payload.total,
        "shipping_details": payload.shipping_details.model_dump(),
        "order_summary": payload.order_summary.model_dump(),
        "payment_reference_id": payload.payment_reference_id,
        "status_history": [history_entry(OrderStatus.PLACED)],
        "cart_items": [
            {
                "productId": item.productId,
                "quantity": item.quantity,
                "customizations": item.customizations,
            }
            for item in payload.cart_items
        ],
    }
    try:
        row = await asyncio.to_thread(orders_repository.insert_order, client, record)
    except (APIError, RuntimeError) as exc:
        logger.error("Order creation failed for user %s: %s", user_id, exc)
        raise UpstreamFailure("Failed to store order") from exc

    order = _format_row(row)
    await notifications_service.notify_order_placed(client, order.order_id, order.total)
    return order


async def update_order_status(
    client: Client,
    order_id: str,
    status: OrderStatus,
    comment: Optional[str] = None,
) -> OrderResponse:
    """Append ``status`` to the order's history and make it current.

    Any status may follow any other. The history and the new status are
    written in one update; two concurrent transitions on the same order can
    still race on the read of the history.
    """
    try:
        existing = await asyncio.to_thread(
            orders_repository.fetch_history_and_owner, client, order_id
        )
    except APIError as exc:
        logger.error("Status update fetch failed for order %s: %s", order_id, exc.message)
        raise UpstreamFailure(exc.message) from exc
    if not existing:
        raise OrderNotFoundError(order_id)

    history = parse_status_history(existing.get("status_history"))
    history = [*history, history_entry(status, comment)]
    try:
        row = await asyncio.to_thread(
            orders_repository.update_status,
            client,
            order_id,
            status_value=status.value,
            status_history=history,
        )
    except APIError as exc:
        logger.error("Status update failed for order %s: %s", order_id, exc.message)
        raise UpstreamFailure(exc.message) from exc
    if not row:
        raise OrderNotFoundError(order_id)

    await notifications_service.notify_status_change(
        client, order_id, status, existing.get("user_id")
    )
    await revalidate_paths(order_paths(order_id))
    logger.info("Order %s moved to %s", order_id, status.value)
    return _format_row(row)


async def get_order(client: Client, order_id: str) -> OrderResponse:
    try:
        row = await asyncio.to_thread(orders_repository.fetch_order, client, order_id)
    except APIError as exc:
        raise UpstreamFailure(exc.message) from exc
    if not row:
        raise OrderNotFoundError(order_id)
    return _format_row(row)


async def list_user_orders(client: Client, user_id: str) -> List[OrderResponse]:
    try:
        rows = await asyncio.to_thread(orders_repository.fetch_user_orders, client, user_id)
    except APIError as exc:
        raise UpstreamFailure(exc.message) from exc
    return [_format_row(row) for row in rows]


async def list_all_orders(client: Client) -> List[OrderResponse]:
    try:
        rows = await asyncio.to_thread(orders_repository.fetch_all_orders, client)
    except APIError as exc:
        logger.error("Error fetching orders for admin: %s", exc.message)
        raise UpstreamFailure("Could not fetch orders.") from exc
    return [_format_row(row) for row in rows]


async def request_cancellation(
    client: Client, user_id: str, order_id: str
) -> OrderResponse:
    order = await get_order(client, order_id)
    if order.user_id != user_id:
        raise OrderNotFoundError(order_id)
    target = CUSTOMER_CANCELLATION.get(order.order_status)
    if target is None:
        raise ValidationFailure(
            f"Order #{order_id} cannot be cancelled while {order.order_status.value}."
        )
    return await update_order_status(client, order_id, target)
