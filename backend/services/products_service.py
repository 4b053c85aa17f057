import asyncio
import logging
from typing import Any, Dict, List

from postgrest.exceptions import APIError
from supabase import Client

from exceptions import UpstreamFailure
from money import to_amount
from repositories import products_repository
from schemas import ProductResponse, ProductUpsert, StockResponse, StockUpdate
from services.revalidation_service import revalidate_paths

logger = logging.getLogger("storefront")


def product_paths(product_id: str | None = None) -> List[str]:
    paths = ["/admin/products", "/products"]
    if product_id:
        paths += [f"/products/{product_id}", f"/admin/products/{product_id}"]
    return paths


def _product_record(payload: ProductUpsert) -> Dict[str, Any]:
    record = payload.model_dump(exclude={"stock"})
    # Zero means "not set" for both optional prices.
    record["mrp"] = payload.mrp if payload.mrp else None
    record["shipping_cost_override"] = (
        payload.shipping_cost_override if payload.shipping_cost_override else None
    )
    return record


def _stock_record(product_id: str, stock: StockUpdate) -> Dict[str, Any]:
    return {
        "product_id": product_id,
        "stock_quantity": stock.quantity,
        "stock_status": stock.status.value,
    }


def _format_product(row: Dict[str, Any]) -> ProductResponse:
    return ProductResponse(
        product_id=str(row["product_id"]),
        product_name=row["product_name"],
        description=row.get("description"),
        price=to_amount(row.get("price")),
        mrp=to_amount(row["mrp"]) if row.get("mrp") is not None else None,
        product_type=row["product_type"],
        specifications=row.get("specifications") or {},
        image_urls=row.get("image_urls") or [],
        audio_url=row.get("audio_url"),
        shipping_cost_override=row.get("shipping_cost_override"),
    )


async def create_product(client: Client, payload: ProductUpsert) -> ProductResponse:
    """Insert the product, then its stock unit; the product is removed if the stock insert fails."""
    try:
        row = await asyncio.to_thread(
            products_repository.insert_product, client, _product_record(payload)
        )
    except (APIError, RuntimeError) as exc:
        logger.error("createProduct error: %s", exc)
        raise UpstreamFailure("Could not create product") from exc

    product_id = str(row["product_id"])
    try:
        await asyncio.to_thread(
            products_repository.insert_stock, client, _stock_record(product_id, payload.stock)
        )
    except APIError as exc:
        logger.error("Stock entry for product %s failed: %s", product_id, exc.message)
        try:
            await asyncio.to_thread(products_repository.delete_product, client, product_id)
        except APIError:
            logger.exception("Could not remove product %s after stock failure", product_id)
        raise UpstreamFailure(exc.message) from exc

    await revalidate_paths(product_paths())
    return _format_product(row)


async def update_product(
    client: Client, product_id: str, payload: ProductUpsert
) -> None:
    try:
        await asyncio.to_thread(
            products_repository.update_product_and_stock,
            client,
            product_id,
            _product_record(payload),
            _stock_record(product_id, payload.stock),
        )
    except APIError as exc:
        logger.error("update_product_and_stock failed for %s: %s", product_id, exc.message)
        raise UpstreamFailure(exc.message) from exc
    await revalidate_paths(product_paths(product_id))


async def update_stock(
    client: Client, product_id: str, payload: StockUpdate
) -> StockResponse:
    record = _stock_record(product_id, payload)
    try:
        row = await asyncio.to_thread(products_repository.upsert_stock, client, record)
    except APIError as exc:
        logger.error("Stock update failed for %s: %s", product_id, exc.message)
        raise UpstreamFailure(exc.message) from exc
    return StockResponse(**(row or record))
