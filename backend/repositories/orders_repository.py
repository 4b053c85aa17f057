from typing import Any, Dict, List, Optional

from supabase import Client

from constants import ORDERS_TABLE


def fetch_order(client: Client, order_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .select("*")
        .eq("order_id", order_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_history_and_owner(client: Client, order_id: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .select("status_history, user_id")
        .eq("order_id", order_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_user_orders(client: Client, user_id: str) -> List[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("order_date", desc=True)
        .execute()
    )
    return response.data or []


def fetch_all_orders(client: Client) -> List[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .select("*")
        .order("order_date", desc=True)
        .execute()
    )
    return response.data or []


def insert_order(client: Client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(ORDERS_TABLE).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store order")
    return response.data[0]


def update_status(
    client: Client,
    order_id: str,
    *,
    status_value: str,
    status_history: List[Dict[str, Any]],
) -> Optional[Dict[str, Any]]:
    response = (
        client.table(ORDERS_TABLE)
        .update({"order_status": status_value, "status_history": status_history})
        .eq("order_id", order_id)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None
