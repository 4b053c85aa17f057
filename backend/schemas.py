from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from constants import BanDuration, DiscountType, OrderStatus, StockStatus


class StatusHistoryItem(BaseModel):
    status: OrderStatus
    date: str
    comment: Optional[str] = None


class CartItem(BaseModel):
    productId: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    customizations: Optional[Dict[str, Any]] = None


class ShippingDetails(BaseModel):
    name: str
    address: str
    city: str
    pincode: str
    phone: str


class OrderSummary(BaseModel):
    subtotal: float = Field(..., ge=0)
    shipping: float = Field(default=0, ge=0)
    coupon_discount: float = Field(default=0, ge=0)
    coupon_code: Optional[str] = None
    total_discount: float = Field(default=0, ge=0)
    grand_total: float = Field(..., ge=0)
    payment_method: Optional[str] = None


class OrderCreate(BaseModel):
    cart_items: List[CartItem] = Field(..., min_length=1)
    total: float = Field(..., ge=0)
    shipping_details: ShippingDetails
    order_summary: OrderSummary
    payment_reference_id: Optional[str] = None


class OrderResponse(BaseModel):
    order_id: str
    user_id: Optional[str]
    order_date: Optional[datetime] = None
    order_status: OrderStatus
    total: float
    cart_items: List[CartItem] = []
    shipping_details: Optional[ShippingDetails] = None
    payment_reference_id: Optional[str] = None
    order_summary: Optional[OrderSummary] = None
    status_history: List[StatusHistoryItem] = []


class OrderListResponse(BaseModel):
    items: List[OrderResponse]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    comment: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("comment")
    @classmethod
    def _blank_comment_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class CouponApplyRequest(BaseModel):
    coupon_code: str = Field(..., min_length=1)
    subtotal: float = Field(..., ge=0)


class CouponApplyResponse(BaseModel):
    success: bool
    discount_amount: float
    error: Optional[str] = None


class CouponUpsert(BaseModel):
    coupon_code: str = Field(..., min_length=3)
    discount_type: DiscountType
    discount_value: float = Field(..., ge=0)
    min_order_amount: Optional[float] = Field(default=None, ge=0)
    max_uses_per_user: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool
    is_hidden: bool

    @field_validator("coupon_code", mode="before")
    @classmethod
    def _normalize_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class CouponResponse(BaseModel):
    coupon_id: int
    coupon_code: str
    discount_type: DiscountType
    discount_value: float
    min_order_amount: float = 0
    max_uses_per_user: int = 1
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool
    is_hidden: bool


class CouponListResponse(BaseModel):
    items: List[CouponResponse]


class NotificationResponse(BaseModel):
    id: int
    user_id: str
    order_id: Optional[str]
    title: str
    message: str
    is_read: bool = False
    created_at: Optional[datetime] = None


class NotificationListResponse(BaseModel):
    items: List[NotificationResponse]
    unread_count: int


class NotificationsReadAllResponse(BaseModel):
    updated: int


class PaymentOrderRequest(BaseModel):
    amount: float = Field(..., gt=0)


class PaymentOrderResponse(BaseModel):
    id: str
    amount: int
    currency: str
    receipt: Optional[str] = None
    status: Optional[str] = None


class PaymentVerifyRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentVerifyResponse(BaseModel):
    is_verified: bool
    payment_method: Optional[str] = None


class StockUpdate(BaseModel):
    quantity: int = Field(..., ge=0)
    status: StockStatus


class StockResponse(BaseModel):
    product_id: str
    stock_quantity: int
    stock_status: StockStatus


class ProductUpsert(BaseModel):
    product_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    mrp: Optional[float] = Field(default=None, ge=0)
    product_type: str = Field(..., min_length=1)
    specifications: Dict[str, Any] = {}
    image_urls: List[str] = []
    audio_url: Optional[str] = None
    shipping_cost_override: Optional[float] = Field(default=None, ge=0)
    stock: StockUpdate


class ProductResponse(BaseModel):
    product_id: str
    product_name: str
    description: Optional[str] = None
    price: float
    mrp: Optional[float] = None
    product_type: str
    specifications: Dict[str, Any] = {}
    image_urls: List[str] = []
    audio_url: Optional[str] = None
    shipping_cost_override: Optional[float] = None


class UserCreate(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: Optional[str] = None
    is_admin: bool = False


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_admin: Optional[bool] = None


class UserBanRequest(BaseModel):
    duration: BanDuration


class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_admin: bool = False
    banned_until: Optional[datetime] = None
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


class UserListResponse(BaseModel):
    items: List[UserResponse]
