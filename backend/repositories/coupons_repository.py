from typing import Any, Dict, List, Optional

from supabase import Client

from constants import COUPONS_TABLE


def fetch_by_code(client: Client, code: str) -> Optional[Dict[str, Any]]:
    response = (
        client.table(COUPONS_TABLE)
        .select("*")
        .eq("coupon_code", code)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_all(client: Client) -> List[Dict[str, Any]]:
    response = (
        client.table(COUPONS_TABLE)
        .select("*")
        .order("coupon_id", desc=True)
        .execute()
    )
    return response.data or []


def fetch_public(client: Client, now_iso: str) -> List[Dict[str, Any]]:
    response = (
        client.table(COUPONS_TABLE)
        .select("*")
        .eq("is_active", True)
        .eq("is_hidden", False)
        .or_(f"valid_until.gte.{now_iso},valid_until.is.null")
        .execute()
    )
    return response.data or []


def insert_coupon(client: Client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(COUPONS_TABLE).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store coupon")
    return response.data[0]


def update_coupon(
    client: Client, coupon_id: int, record: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    response = (
        client.table(COUPONS_TABLE).update(record).eq("coupon_id", coupon_id).execute()
    )
    items = response.data or []
    return items[0] if items else None


def delete_coupon(client: Client, coupon_id: int) -> bool:
    response = client.table(COUPONS_TABLE).delete().eq("coupon_id", coupon_id).execute()
    return bool(response.data)
