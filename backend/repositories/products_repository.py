from typing import Any, Dict, Optional

from supabase import Client

from constants import PRODUCTS_TABLE, STOCK_TABLE, UPDATE_PRODUCT_RPC


def insert_product(client: Client, record: Dict[str, Any]) -> Dict[str, Any]:
    response = client.table(PRODUCTS_TABLE).insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store product")
    return response.data[0]


def delete_product(client: Client, product_id: str) -> None:
    client.table(PRODUCTS_TABLE).delete().eq("product_id", product_id).execute()


def insert_stock(client: Client, record: Dict[str, Any]) -> None:
    client.table(STOCK_TABLE).insert(record).execute()


def upsert_stock(client: Client, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    response = (
        client.table(STOCK_TABLE).upsert(record, on_conflict="product_id").execute()
    )
    items = response.data or []
    return items[0] if items else None


def update_product_and_stock(
    client: Client,
    product_id: str,
    product: Dict[str, Any],
    stock: Dict[str, Any],
) -> Any:
    """Product row and its stock unit are written together by a database function."""
    response = client.rpc(
        UPDATE_PRODUCT_RPC,
        {"p_id": product_id, "p_data": product, "s_data": stock},
    ).execute()
    return response.data
