"""Sepetten sipariş oluşturma (checkout orkestratörü).

Transaction dışı (okuma): adres, sepet + katalog, snapshot, kargo politikası.
Transaction içi: kilitli kupon doğrulama, toplam, sipariş no, sipariş + kalemler +
kargo etiketi, kupon kullanım kaydı, sepet temizliği, commit.
Herhangi bir adımda hata: rollback, yarım sipariş kalmaz.
Bildirimler commit sonrası çağıran tarafından (BackgroundTasks) gönderilir.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from aesthco.core.config import settings
from aesthco.core.errors import EmptyCart, InvalidCoupon, ShopError
from aesthco.models import CartItem, CouponRedemption, Order, OrderItem, User
from aesthco.models.order import PAYMENT_METHOD_COD, OrderStatus, PaymentStatus

from .address_book import get_address
from .cart_snapshot import OrderLine, build_order_lines, subtotal_of
from .catalog import get_cart_lines_with_catalog
from .coupon import Identity, validate_coupon
from .order_sequence import next_order_id
from .shipping import get_active_shipping_policy, shipping_fee_for

log = logging.getLogger("aesthco.checkout")


@dataclass(frozen=True)
class AddressCopy:
    name: str
    phone: str | None
    line1: str
    line2: str | None
    city: str
    state: str
    postal_code: str | None


@dataclass
class CheckoutResult:
    order: Order
    items: list[OrderItem]
    redemption: CouponRedemption | None = None


def order_total(subtotal: int, shipping_fee: int, discount_amount: int) -> int:
    return max(0, subtotal + shipping_fee - discount_amount)


def build_shipping_label(order: Order, items: list[OrderItem]) -> dict:
    """Kargo/teslimat tarafına devredilen düz özet (kapıda tahsil edilecek tutar dahil)."""
    return {
        "orderId": order.id,
        "codAmount": order.total,
        "paymentMethod": order.payment_method,
        "customer": {"name": order.address_name, "phone": order.address_phone},
        "address": {
            "line1": order.address_line1,
            "line2": order.address_line2,
            "city": order.city,
            "state": order.state,
            "postalCode": order.postal_code,
        },
        "items": [
            {"name": i.product_name, "qty": i.quantity, "amount": i.total_price, "sku": i.sku}
            for i in items
        ],
    }


def _insert_items(db: Session, order_id: str, lines: list[OrderLine]) -> list[OrderItem]:
    items = [
        OrderItem(
            order_id=order_id,
            product_id=line.product_id,
            product_name=line.product_name,
            product_slug=line.product_slug,
            variant_id=line.variant_id,
            color_id=line.color_id,
            size_id=line.size_id,
            color_name=line.color_name,
            size_name=line.size_name,
            sku=line.sku,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.total_price,
            image_url=line.image_url,
        )
        for line in lines
    ]
    db.add_all(items)
    db.flush()
    return items


def _place_order(
    db: Session,
    user: User,
    address: AddressCopy,
    lines: list[OrderLine],
    subtotal: int,
    shipping_fee: int,
    coupon_code: str | None,
) -> CheckoutResult:
    """Tek transaction'ın gövdesi; commit/rollback çağırana ait."""
    identity = Identity.of(user.id, user.email, user.phone_number)
    coupon = None
    discount = 0
    if coupon_code:
        try:
            check = validate_coupon(db, coupon_code, identity, subtotal, lock=True)
        except ShopError as e:
            raise InvalidCoupon(e) from e
        coupon, discount = check.coupon, check.discount_amount

    order = Order(
        id=next_order_id(db),
        user_id=user.id,
        status=OrderStatus.PLACED.value,
        payment_method=PAYMENT_METHOD_COD,
        payment_status=PaymentStatus.PENDING.value,
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        discount_amount=discount,
        coupon_id=coupon.id if coupon else None,
        coupon_code=coupon.code if coupon else None,
        total=order_total(subtotal, shipping_fee, discount),
        address_name=address.name,
        address_phone=address.phone,
        address_line1=address.line1,
        address_line2=address.line2,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
    )
    db.add(order)
    db.flush()

    items = _insert_items(db, order.id, lines)
    order.shipping_label = build_shipping_label(order, items)
    db.add(order)

    redemption = None
    if coupon:
        redemption = CouponRedemption(
            coupon_id=coupon.id,
            user_id=user.id,
            email=identity.email,
            phone=identity.phone,
            order_id=order.id,
            discount_amount=discount,
        )
        db.add(redemption)

    db.execute(delete(CartItem).where(CartItem.user_id == user.id))
    db.flush()
    return CheckoutResult(order=order, items=items, redemption=redemption)


def create_order_from_cart(
    db: Session,
    user: User,
    address_id: int,
    coupon_code: str | None = None,
) -> CheckoutResult:
    """
    Sepeti siparişe çevirir.
    Hatalar: AddressNotFound, EmptyCart, ProductInactive, VariantNotFound, OutOfStock, InvalidCoupon.
    Sipariş no çakışmasında (IntegrityError) transaction baştan denenir.
    """
    addr = get_address(db, address_id, user.id)
    address = AddressCopy(
        name=addr.name,
        phone=addr.phone_number,
        line1=addr.address_line1,
        line2=addr.address_line2,
        city=addr.city,
        state=addr.state,
        postal_code=addr.postal_code,
    )
    cart_lines = get_cart_lines_with_catalog(db, user.id)
    if not cart_lines:
        raise EmptyCart()
    lines = build_order_lines(cart_lines)
    subtotal = subtotal_of(lines)
    shipping_fee = shipping_fee_for(subtotal, get_active_shipping_policy(db))
    # Okuma transaction'ını kapat; yazma transaction'ı temiz başlasın
    db.rollback()

    attempts = max(1, settings.order_id_max_attempts)
    attempt = 0
    while True:
        attempt += 1
        try:
            result = _place_order(db, user, address, lines, subtotal, shipping_fee, coupon_code)
            db.commit()
        except IntegrityError:
            db.rollback()
            if attempt >= attempts:
                log.error("order insert failed after %s attempts user_id=%s", attempts, user.id)
                raise
            log.warning("order id conflict, retrying attempt=%s user_id=%s", attempt, user.id)
            continue
        except Exception:
            db.rollback()
            raise
        order = result.order
        log.info(
            "order placed id=%s user_id=%s subtotal=%s shipping=%s discount=%s total=%s coupon=%s",
            order.id,
            user.id,
            order.subtotal,
            order.shipping_fee,
            order.discount_amount,
            order.total,
            order.coupon_code,
        )
        return result
