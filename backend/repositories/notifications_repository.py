from typing import Any, Dict, List, Optional

from supabase import Client

from constants import (
    ADMIN_IDS_RPC,
    ADMIN_NOTIFICATIONS_RPC,
    NOTIFICATION_LIMIT,
    NOTIFICATIONS_TABLE,
)


def fetch_admin_user_ids(client: Client) -> List[str]:
    response = client.rpc(ADMIN_IDS_RPC).execute()
    rows = response.data or []
    return [row["user_id"] for row in rows if row.get("user_id")]


def insert_notifications(client: Client, records: List[Dict[str, Any]]) -> None:
    if not records:
        return
    client.table(NOTIFICATIONS_TABLE).insert(records).execute()


def fetch_user_notifications(
    client: Client, user_id: str, limit: int = NOTIFICATION_LIMIT
) -> List[Dict[str, Any]]:
    response = (
        client.table(NOTIFICATIONS_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return response.data or []


def mark_read(
    client: Client, user_id: str, notification_id: int
) -> Optional[Dict[str, Any]]:
    response = (
        client.table(NOTIFICATIONS_TABLE)
        .update({"is_read": True})
        .eq("id", notification_id)
        .eq("user_id", user_id)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_admin_notifications(client: Client) -> List[Dict[str, Any]]:
    response = client.rpc(ADMIN_NOTIFICATIONS_RPC).execute()
    return response.data or []


def mark_all_read(client: Client, user_id: str) -> int:
    response = (
        client.table(NOTIFICATIONS_TABLE)
        .update({"is_read": True})
        .eq("user_id", user_id)
        .eq("is_read", False)
        .execute()
    )
    return len(response.data or [])
