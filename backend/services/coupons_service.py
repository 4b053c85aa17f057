import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from constants import DiscountType
from exceptions import CouponNotFoundError, CouponRejected, NotFoundError, UpstreamFailure
from money import format_price, to_amount
from repositories import coupons_repository
from schemas import CouponApplyResponse, CouponResponse, CouponUpsert
from services.revalidation_service import revalidate_paths

logger = logging.getLogger("storefront")

COUPONS_ADMIN_PATH = "/admin/marketing/coupons"
DEFAULT_MIN_ORDER_AMOUNT = 0
DEFAULT_MAX_USES_PER_USER = 1


@dataclass
class CouponEvaluation:
    discount_amount: float


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def evaluate_coupon(
    coupon: Dict[str, Any],
    subtotal: float,
    now: Optional[datetime] = None,
) -> CouponEvaluation:
    """Validate a coupon row against ``subtotal`` and compute its discount.

    Raises :class:`CouponRejected` with the first failing rule. Usage limits
    per customer are stored on the row but not checked here.
    """
    now = now or datetime.now(timezone.utc)
    if not coupon.get("is_active"):
        raise CouponRejected("inactive", "This coupon is not active.")

    valid_from = _parse_datetime(coupon.get("valid_from"))
    if valid_from and valid_from > now:
        raise CouponRejected("not_yet_valid", "This coupon is not yet valid.")
    valid_until = _parse_datetime(coupon.get("valid_until"))
    if valid_until and valid_until < now:
        raise CouponRejected("expired", "This coupon has expired.")

    min_order_amount = to_amount(coupon.get("min_order_amount"))
    if subtotal < min_order_amount:
        raise CouponRejected(
            "minimum_not_met",
            f"Minimum order of {format_price(min_order_amount)} is required.",
        )

    value = float(coupon.get("discount_value") or 0)
    if coupon.get("discount_type") == DiscountType.PERCENTAGE.value:
        discount = subtotal * value / 100
    else:
        discount = value
    # Never more than the subtotal, even after rounding.
    return CouponEvaluation(discount_amount=min(to_amount(discount), subtotal))


async def apply_coupon(
    client: Client, coupon_code: str, subtotal: float
) -> CouponApplyResponse:
    code = normalize_code(coupon_code)
    try:
        coupon = await asyncio.to_thread(coupons_repository.fetch_by_code, client, code)
    except APIError as exc:
        raise UpstreamFailure(f"Could not look up coupon: {exc.message}") from exc
    try:
        if not coupon:
            raise CouponNotFoundError()
        evaluation = evaluate_coupon(coupon, subtotal)
    except (CouponNotFoundError, CouponRejected) as exc:
        logger.info("Coupon %s rejected for subtotal %s: %s", code, subtotal, exc)
        return CouponApplyResponse(success=False, discount_amount=0, error=str(exc))
    return CouponApplyResponse(success=True, discount_amount=evaluation.discount_amount)


def _format_row(row: Dict[str, Any]) -> CouponResponse:
    return CouponResponse(
        coupon_id=row["coupon_id"],
        coupon_code=row["coupon_code"],
        discount_type=row["discount_type"],
        discount_value=to_amount(row.get("discount_value")),
        min_order_amount=to_amount(row.get("min_order_amount")),
        max_uses_per_user=row.get("max_uses_per_user") or DEFAULT_MAX_USES_PER_USER,
        valid_from=row.get("valid_from"),
        valid_until=row.get("valid_until"),
        is_active=bool(row.get("is_active")),
        is_hidden=bool(row.get("is_hidden")),
    )


def _to_record(payload: CouponUpsert) -> Dict[str, Any]:
    return {
        "coupon_code": payload.coupon_code,
        "discount_type": payload.discount_type.value,
        "discount_value": payload.discount_value,
        "min_order_amount": payload.min_order_amount or DEFAULT_MIN_ORDER_AMOUNT,
        "max_uses_per_user": payload.max_uses_per_user or DEFAULT_MAX_USES_PER_USER,
        "valid_from": payload.valid_from.isoformat() if payload.valid_from else None,
        "valid_until": payload.valid_until.isoformat() if payload.valid_until else None,
        "is_active": payload.is_active,
        "is_hidden": payload.is_hidden,
    }


async def list_available_coupons(client: Client) -> List[CouponResponse]:
    now_iso = datetime.now(timezone.utc).isoformat()
    try:
        rows = await asyncio.to_thread(coupons_repository.fetch_public, client, now_iso)
    except APIError as exc:
        logger.error("Error fetching available coupons: %s", exc.message)
        return []
    return [_format_row(row) for row in rows]


async def list_coupons(client: Client) -> List[CouponResponse]:
    try:
        rows = await asyncio.to_thread(coupons_repository.fetch_all, client)
    except APIError as exc:
        raise UpstreamFailure(f"Could not fetch coupons: {exc.message}") from exc
    return [_format_row(row) for row in rows]


async def upsert_coupon(
    client: Client,
    payload: CouponUpsert,
    coupon_id: Optional[int] = None,
) -> CouponResponse:
    record = _to_record(payload)
    try:
        if coupon_id is None:
            row = await asyncio.to_thread(coupons_repository.insert_coupon, client, record)
        else:
            row = await asyncio.to_thread(
                coupons_repository.update_coupon, client, coupon_id, record
            )
    except (APIError, RuntimeError) as exc:
        raise UpstreamFailure(f"Could not save coupon {payload.coupon_code}") from exc
    if row is None:
        raise NotFoundError(f"Coupon {coupon_id} not found")
    await revalidate_paths([COUPONS_ADMIN_PATH])
    return _format_row(row)


async def delete_coupon(client: Client, coupon_id: int) -> None:
    try:
        deleted = await asyncio.to_thread(coupons_repository.delete_coupon, client, coupon_id)
    except APIError as exc:
        raise UpstreamFailure(f"Could not delete coupon {coupon_id}") from exc
    if not deleted:
        raise NotFoundError(f"Coupon {coupon_id} not found")
    await revalidate_paths([COUPONS_ADMIN_PATH])
