class StorefrontError(Exception):
    pass


class NotFoundError(StorefrontError):
    pass


class ValidationFailure(StorefrontError):
    pass


class UpstreamFailure(StorefrontError):
    """A call to Supabase or the payment gateway failed."""


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class CouponNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Coupon not found.")


class CouponRejected(ValidationFailure):
    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)
