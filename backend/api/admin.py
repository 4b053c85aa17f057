from fastapi import APIRouter, Depends, HTTPException, Response, status
from supabase import Client

from auth import require_admin
from exceptions import NotFoundError, UpstreamFailure
from schemas import (
    CouponListResponse,
    CouponResponse,
    CouponUpsert,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    ProductResponse,
    ProductUpsert,
    StockResponse,
    StockUpdate,
    UserBanRequest,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from services import coupons_service, orders_service, products_service, users_service
from supabase_client import get_supabase

router = APIRouter(
    prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(client: Client = Depends(get_supabase)) -> OrderListResponse:
    try:
        items = await orders_service.list_all_orders(client)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return OrderListResponse(items=items)


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    client: Client = Depends(get_supabase),
) -> OrderResponse:
    try:
        return await orders_service.update_order_status(
            client, order_id, payload.status, payload.comment
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.get("/coupons", response_model=CouponListResponse)
async def list_coupons(client: Client = Depends(get_supabase)) -> CouponListResponse:
    try:
        items = await coupons_service.list_coupons(client)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return CouponListResponse(items=items)


@router.post("/coupons", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    payload: CouponUpsert,
    client: Client = Depends(get_supabase),
) -> CouponResponse:
    try:
        return await coupons_service.upsert_coupon(client, payload)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.put("/coupons/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: int,
    payload: CouponUpsert,
    client: Client = Depends(get_supabase),
) -> CouponResponse:
    try:
        return await coupons_service.upsert_coupon(client, payload, coupon_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.delete("/coupons/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_coupon(
    coupon_id: int,
    client: Client = Depends(get_supabase),
) -> Response:
    try:
        await coupons_service.delete_coupon(client, coupon_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users", response_model=UserListResponse)
async def list_users(client: Client = Depends(get_supabase)) -> UserListResponse:
    try:
        items = await users_service.list_users(client)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return UserListResponse(items=items)


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    client: Client = Depends(get_supabase),
) -> UserResponse:
    try:
        return await users_service.create_user(client, payload)
    except UpstreamFailure as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    client: Client = Depends(get_supabase),
) -> UserResponse:
    try:
        return await users_service.update_user(client, user_id, payload)
    except UpstreamFailure as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/users/{user_id}/ban", response_model=UserResponse)
async def ban_user(
    user_id: str,
    payload: UserBanRequest,
    client: Client = Depends(get_supabase),
) -> UserResponse:
    try:
        return await users_service.ban_user(client, user_id, payload.duration)
    except UpstreamFailure as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/users/{user_id}/unban", response_model=UserResponse)
async def unban_user(user_id: str, client: Client = Depends(get_supabase)) -> UserResponse:
    try:
        return await users_service.unban_user(client, user_id)
    except UpstreamFailure as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, client: Client = Depends(get_supabase)) -> Response:
    try:
        await users_service.delete_user(client, user_id)
    except UpstreamFailure as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductUpsert,
    client: Client = Depends(get_supabase),
) -> ProductResponse:
    try:
        return await products_service.create_product(client, payload)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.put("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_product(
    product_id: str,
    payload: ProductUpsert,
    client: Client = Depends(get_supabase),
) -> Response:
    try:
        await products_service.update_product(client, product_id, payload)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/products/{product_id}/stock", response_model=StockResponse)
async def update_stock(
    product_id: str,
    payload: StockUpdate,
    client: Client = Depends(get_supabase),
) -> StockResponse:
    try:
        return await products_service.update_stock(client, product_id, payload)
    except UpstreamFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
