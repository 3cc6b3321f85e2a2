"""Domain hataları: her biri HTTP durum kodu ve makine okunur `code` taşır.

Servisler bu istisnaları fırlatır; main.py'deki handler tek tip JSON zarfına çevirir.
"""


class ShopError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def as_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class InvalidInput(ShopError):
    status_code = 400
    code = "invalid_input"


class Unauthorized(ShopError):
    status_code = 401
    code = "unauthorized"


class Forbidden(ShopError):
    status_code = 403
    code = "forbidden"


class NotFound(ShopError):
    status_code = 404
    code = "not_found"


class StateConflict(ShopError):
    status_code = 409
    code = "state_conflict"


# ---------- Checkout ----------
class AddressNotFound(NotFound):
    code = "address_not_found"

    def __init__(self, message: str = "Address not found"):
        super().__init__(message)


class EmptyCart(InvalidInput):
    code = "empty_cart"

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class ProductInactive(StateConflict):
    code = "product_inactive"


class VariantNotFound(StateConflict):
    code = "variant_not_found"


class OutOfStock(StateConflict):
    code = "out_of_stock"


# ---------- Kupon ----------
class CouponNotFound(NotFound):
    code = "invalid_coupon"

    def __init__(self, message: str = "Invalid coupon code"):
        super().__init__(message)


class CouponRejected(StateConflict):
    """Kupon bulundu ama kurallardan biri tutmadı; `reason` hangi kural olduğunu söyler."""

    code = "coupon_rejected"

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason

    def as_dict(self) -> dict:
        return {**super().as_dict(), "reason": self.reason}


LIMIT_REASONS = ("global_limit_reached", "user_limit_reached")


class LimitReached(CouponRejected):
    code = "limit_reached"


class InvalidCoupon(ShopError):
    """Checkout sırasında oluşan herhangi bir kupon hatasını sarar; durum kodu içteki hatadan gelir."""

    code = "invalid_coupon"

    def __init__(self, cause: ShopError):
        super().__init__(cause.message)
        self.cause = cause
        self.status_code = cause.status_code
        self.reason = getattr(cause, "reason", None) or cause.code

    def as_dict(self) -> dict:
        return {**super().as_dict(), "reason": self.reason}


# ---------- Sipariş yaşam döngüsü ----------
class OrderNotFound(NotFound):
    code = "order_not_found"

    def __init__(self, message: str = "Order not found"):
        super().__init__(message)


class IllegalTransition(StateConflict):
    code = "illegal_transition"


class OrderNotCancellable(StateConflict):
    code = "order_not_cancellable"

    def __init__(self, message: str = "Order cannot be cancelled at this stage."):
        super().__init__(message)
