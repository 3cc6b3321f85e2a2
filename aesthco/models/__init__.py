from .address import UserAddress
from .cart import CartItem
from .catalog import Color, Product, ProductImage, ProductVariant, Size
from .coupon import Coupon, CouponRedemption, CouponType, DiscountType
from .error_log import ErrorLog
from .order import Order, OrderItem, OrderSequence, OrderStatus, PaymentStatus
from .shipping import ShippingSetting
from .user import User, UserRole

__all__ = [
    "CartItem",
    "Color",
    "Coupon",
    "CouponRedemption",
    "CouponType",
    "DiscountType",
    "ErrorLog",
    "Order",
    "OrderItem",
    "OrderSequence",
    "OrderStatus",
    "PaymentStatus",
    "Product",
    "ProductImage",
    "ProductVariant",
    "ShippingSetting",
    "Size",
    "User",
    "UserAddress",
    "UserRole",
]
