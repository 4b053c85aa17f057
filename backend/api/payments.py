from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_current_user_id
from exceptions import UpstreamFailure
from schemas import (
    PaymentOrderRequest,
    PaymentOrderResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
)
from services import payments_service

router = APIRouter(
    prefix="/api/payments",
    tags=["payments"],
    dependencies=[Depends(get_current_user_id)],
)


@router.post("/orders", response_model=PaymentOrderResponse)
async def create_payment_order(
    payload: PaymentOrderRequest,
) -> PaymentOrderResponse:
    try:
        return await payments_service.create_payment_order(payload.amount)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.post("/verify", response_model=PaymentVerifyResponse)
async def verify_payment(
    payload: PaymentVerifyRequest,
) -> PaymentVerifyResponse:
    return await payments_service.verify_payment(
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
    )
