from .address import AddressCreate, AddressResponse, AddressUpdate
from .auth import Token, UserCreate, UserLogin, UserResponse
from .cart import CartItemCreate, CartItemResponse, CartItemUpdate
from .coupon import (
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
)
from .order import (
    CreateOrderRequest,
    OrderItemResponse,
    OrderResponse,
    PartnerStatusUpdate,
    ShippingSettingRequest,
    ShippingSettingResponse,
)

__all__ = [
    "AddressCreate",
    "AddressResponse",
    "AddressUpdate",
    "CartItemCreate",
    "CartItemResponse",
    "CartItemUpdate",
    "CouponCreate",
    "CouponResponse",
    "CouponUpdate",
    "CouponValidateRequest",
    "CouponValidateResponse",
    "CreateOrderRequest",
    "OrderItemResponse",
    "OrderResponse",
    "PartnerStatusUpdate",
    "ShippingSettingRequest",
    "ShippingSettingResponse",
    "Token",
    "UserCreate",
    "UserLogin",
    "UserResponse",
]
