import hashlib
import hmac
import logging
import time
from typing import Optional

import httpx

from config import Settings, settings
from exceptions import UpstreamFailure
from schemas import PaymentOrderResponse, PaymentVerifyResponse

logger = logging.getLogger("storefront")

RAZORPAY_API_URL = "https://api.razorpay.com/v1"


def _auth(config: Settings) -> httpx.BasicAuth:
    return httpx.BasicAuth(config.razorpay_key_id, config.razorpay_key_secret)


def expected_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def is_signature_valid(
    order_id: str, payment_id: str, signature: str, secret: str
) -> bool:
    return hmac.compare_digest(expected_signature(order_id, payment_id, secret), signature)


async def create_payment_order(
    amount: float, config: Settings = settings
) -> PaymentOrderResponse:
    payload = {
        # Razorpay takes the smallest currency unit.
        "amount": int(round(amount * 100)),
        "currency": config.currency_code,
        "receipt": f"receipt_order_{int(time.time() * 1000)}",
    }
    try:
        async with httpx.AsyncClient(timeout=10, auth=_auth(config)) as client:
            response = await client.post(f"{RAZORPAY_API_URL}/orders", json=payload)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error("Razorpay order creation failed: %s", exc)
        raise UpstreamFailure("Could not create order with Razorpay") from exc
    return PaymentOrderResponse(**response.json())


async def _fetch_payment_method(payment_id: str, config: Settings) -> Optional[str]:
    try:
        async with httpx.AsyncClient(timeout=10, auth=_auth(config)) as client:
            response = await client.get(f"{RAZORPAY_API_URL}/payments/{payment_id}")
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Failed to fetch payment details for %s: %s", payment_id, exc)
        return None
    return response.json().get("method")


async def verify_payment(
    order_id: str,
    payment_id: str,
    signature: str,
    config: Settings = settings,
) -> PaymentVerifyResponse:
    if not config.razorpay_key_secret:
        logger.warning("RAZORPAY_KEY_SECRET is not set; refusing to verify order %s", order_id)
        return PaymentVerifyResponse(is_verified=False)
    verified = is_signature_valid(order_id, payment_id, signature, config.razorpay_key_secret)
    if not verified:
        logger.warning("Payment signature mismatch for order %s", order_id)
        return PaymentVerifyResponse(is_verified=False)
    method = await _fetch_payment_method(payment_id, config)
    return PaymentVerifyResponse(is_verified=True, payment_method=method)
