from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from auth import get_current_user_id
from exceptions import UpstreamFailure
from schemas import CouponApplyRequest, CouponApplyResponse, CouponListResponse
from services import coupons_service
from supabase_client import get_supabase

router = APIRouter(prefix="/api/coupons", tags=["coupons"])


@router.post(
    "/apply",
    response_model=CouponApplyResponse,
    dependencies=[Depends(get_current_user_id)],
)
async def apply_coupon(
    payload: CouponApplyRequest,
    client: Client = Depends(get_supabase),
) -> CouponApplyResponse:
    try:
        return await coupons_service.apply_coupon(
            client, payload.coupon_code, payload.subtotal
        )
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.get(
    "/available",
    response_model=CouponListResponse,
    dependencies=[Depends(get_current_user_id)],
)
async def read_available_coupons(
    client: Client = Depends(get_supabase),
) -> CouponListResponse:
    items = await coupons_service.list_available_coupons(client)
    return CouponListResponse(items=items)
