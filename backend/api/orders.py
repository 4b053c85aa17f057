from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from auth import get_current_user, get_current_user_id, is_admin
from exceptions import NotFoundError, UpstreamFailure, ValidationFailure
from schemas import OrderCreate, OrderListResponse, OrderResponse
from services import orders_service
from supabase_client import get_supabase

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    user_id: str = Depends(get_current_user_id),
    client: Client = Depends(get_supabase),
) -> OrderResponse:
    try:
        return await orders_service.create_order(client, user_id, payload)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.get("", response_model=OrderListResponse)
async def list_orders(
    user_id: str = Depends(get_current_user_id),
    client: Client = Depends(get_supabase),
) -> OrderListResponse:
    try:
        items = await orders_service.list_user_orders(client, user_id)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return OrderListResponse(items=items)


@router.get("/{order_id}", response_model=OrderResponse)
async def read_order(
    order_id: str,
    user: dict = Depends(get_current_user),
    client: Client = Depends(get_supabase),
) -> OrderResponse:
    try:
        order = await orders_service.get_order(client, order_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    # Other customers' orders look missing rather than forbidden.
    if order.user_id != user["id"] and not is_admin(user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return order


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    user_id: str = Depends(get_current_user_id),
    client: Client = Depends(get_supabase),
) -> OrderResponse:
    try:
        return await orders_service.request_cancellation(client, user_id, order_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValidationFailure as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
