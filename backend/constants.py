from enum import Enum

ORDERS_TABLE = "orders"
COUPONS_TABLE = "coupons"
NOTIFICATIONS_TABLE = "notifications"
PRODUCTS_TABLE = "products"
STOCK_TABLE = "stock_keeping_units"
UPDATE_PRODUCT_RPC = "update_product_and_stock"
ADMIN_IDS_RPC = "get_admin_user_ids"
ADMIN_NOTIFICATIONS_RPC = "get_admin_notifications"

NOTIFICATION_LIMIT = 20


class OrderStatus(str, Enum):
    PLACED = "Placed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    CANCELLATION_PENDING = "Cancellation Pending"
    REFUNDED = "Refunded"


class StockStatus(str, Enum):
    IN_STOCK = "in-stock"
    OUT_OF_STOCK = "out-of-stock"
    ARCHIVED = "archived"


class BanDuration(str, Enum):
    FOREVER = "forever"
    DAY = "24h"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


# Customer-initiated cancellation: current status -> requested status.
CUSTOMER_CANCELLATION = {
    OrderStatus.PLACED: OrderStatus.CANCELLED,
    OrderStatus.PROCESSING: OrderStatus.CANCELLATION_PENDING,
    OrderStatus.SHIPPED: OrderStatus.CANCELLATION_PENDING,
}
