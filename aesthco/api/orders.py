"""Sipariş uçları: checkout, müşteri okumaları/iptal, partner akışı, admin ve kargo ayarı.

Bildirimler commit sonrası BackgroundTasks ile gider; yanıt e-postayı beklemez.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlmodel import Session, select

from aesthco.api.deps import require_customer, require_partner, require_super_admin
from aesthco.core.database import get_db
from aesthco.core.rate_limit import checkout_limit, limiter
from aesthco.models import Order, OrderItem, User, UserRole
from aesthco.models.order import OrderStatus
from aesthco.schemas import (
    CreateOrderRequest,
    OrderItemResponse,
    OrderResponse,
    PartnerStatusUpdate,
    ShippingSettingRequest,
    ShippingSettingResponse,
)
from aesthco.services import order_lifecycle as lifecycle
from aesthco.services.checkout import create_order_from_cart
from aesthco.services.notifier import OrderNotifier, get_notifier, snapshot_order
from aesthco.services.shipping import get_active_shipping_policy, save_shipping_policy

router = APIRouter(prefix="/orders", tags=["orders"])


def _order_response(order: Order, items: list[OrderItem]) -> OrderResponse:
    resp = OrderResponse.model_validate(order)
    resp.items = [OrderItemResponse.model_validate(i) for i in items]
    return resp


def _with_items(db: Session, order: Order) -> OrderResponse:
    return _order_response(order, lifecycle.get_items(db, order.id))


def _active_partner_emails(db: Session) -> list[str]:
    rows = db.exec(
        select(User.email).where(User.role == UserRole.PARTNER, User.is_active == True)  # noqa: E712
    ).all()
    return [e for e in rows if e]


def _user_email(db: Session, user_id: int | None) -> str | None:
    if user_id is None:
        return None
    user = db.get(User, user_id)
    return user.email if user else None


# ---------- Kargo ayarı ----------
def _policy_response(db: Session) -> ShippingSettingResponse:
    policy = get_active_shipping_policy(db)
    return ShippingSettingResponse(
        id=policy.setting_id,
        free_shipping_threshold=policy.threshold,
        shipping_fee=policy.fee,
    )


@router.get("/shipping-settings", response_model=ShippingSettingResponse)
def shipping_settings(_: User = Depends(require_customer), db: Session = Depends(get_db)):
    return _policy_response(db)


@router.get("/admin/shipping-settings", response_model=ShippingSettingResponse)
def admin_shipping_settings(_: User = Depends(require_super_admin), db: Session = Depends(get_db)):
    return _policy_response(db)


@router.post("/admin/shipping-settings", response_model=ShippingSettingResponse, status_code=201)
def admin_save_shipping_settings(
    body: ShippingSettingRequest,
    _: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    row = save_shipping_policy(db, body.free_shipping_threshold, body.shipping_fee)
    return ShippingSettingResponse(
        id=row.id,
        free_shipping_threshold=row.free_shipping_threshold,
        shipping_fee=row.shipping_fee,
    )


# ---------- Müşteri ----------
@router.post("", response_model=OrderResponse, status_code=201)
@limiter.limit(checkout_limit)
def create_order(
    request: Request,
    body: CreateOrderRequest,
    background: BackgroundTasks,
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
):
    result = create_order_from_cart(db, user, body.address_id, body.coupon_code)
    snap = snapshot_order(result.order, result.items, user.full_name)
    background.add_task(notifier.notify_order_status, snap, OrderStatus.PLACED.value, user.email)
    background.add_task(notifier.notify_partners_new_order, snap, _active_partner_emails(db))
    return _order_response(result.order, result.items)


@router.get("", response_model=list[OrderResponse])
def my_orders(user: User = Depends(require_customer), db: Session = Depends(get_db)):
    return [_with_items(db, o) for o in lifecycle.list_customer_orders(db, user.id)]


@router.patch("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: str,
    background: BackgroundTasks,
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
):
    order = lifecycle.cancel_by_customer(db, order_id, user.id)
    items = lifecycle.get_items(db, order.id)
    snap = snapshot_order(order, items, user.full_name)
    background.add_task(notifier.notify_order_status, snap, OrderStatus.CANCELLED.value, user.email)
    background.add_task(notifier.notify_partner_cancelled, snap, _user_email(db, order.assigned_partner_id))
    return _order_response(order, items)


# ---------- Partner ----------
@router.get("/partner/list", response_model=list[OrderResponse])
def partner_orders(
    status: OrderStatus | None = None,
    _: User = Depends(require_partner),
    db: Session = Depends(get_db),
):
    return [_with_items(db, o) for o in lifecycle.list_orders(db, status.value if status else None)]


@router.get("/partner/{order_id}", response_model=OrderResponse)
def partner_order(order_id: str, _: User = Depends(require_partner), db: Session = Depends(get_db)):
    return _with_items(db, lifecycle.get_order(db, order_id))


@router.patch("/partner/{order_id}/accept", response_model=OrderResponse)
def partner_accept(order_id: str, partner: User = Depends(require_partner), db: Session = Depends(get_db)):
    return _with_items(db, lifecycle.accept_by_partner(db, order_id, partner.id))


def _apply_partner_status(
    db: Session,
    order_id: str,
    partner: User,
    target: OrderStatus,
    background: BackgroundTasks,
    notifier: OrderNotifier,
) -> OrderResponse:
    change = lifecycle.update_status_by_partner(db, order_id, partner.id, target)
    order = change.order
    items = lifecycle.get_items(db, order.id)
    customer = db.get(User, order.user_id)
    snap = snapshot_order(order, items, customer.full_name if customer else None)
    background.add_task(notifier.notify_order_status, snap, order.status, customer.email if customer else None)
    if change.delivery_code:
        background.add_task(notifier.notify_partner_delivery_code, order.id, partner.email, change.delivery_code)
    return _order_response(order, items)


@router.patch("/partner/{order_id}/status", response_model=OrderResponse)
def partner_update_status(
    order_id: str,
    body: PartnerStatusUpdate,
    background: BackgroundTasks,
    partner: User = Depends(require_partner),
    db: Session = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
):
    return _apply_partner_status(db, order_id, partner, body.status, background, notifier)


# ---------- Admin ----------
@router.get("/admin/list", response_model=list[OrderResponse])
def admin_orders(
    status: OrderStatus | None = None,
    _: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return [_with_items(db, o) for o in lifecycle.list_orders(db, status.value if status else None)]


@router.get("/admin/{order_id}", response_model=OrderResponse)
def admin_order(order_id: str, _: User = Depends(require_super_admin), db: Session = Depends(get_db)):
    return _with_items(db, lifecycle.get_order(db, order_id))


# ---------- Tek sipariş (en sonda: /{order_id} diğer sabit yolları gölgelemesin) ----------
@router.get("/{order_id}", response_model=OrderResponse)
def my_order(order_id: str, user: User = Depends(require_customer), db: Session = Depends(get_db)):
    return _with_items(db, lifecycle.get_customer_order(db, order_id, user.id))


@router.patch("/{order_id}", response_model=OrderResponse)
def partner_transition(
    order_id: str,
    body: PartnerStatusUpdate,
    background: BackgroundTasks,
    partner: User = Depends(require_partner),
    db: Session = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
):
    """PATCH /orders/{id} ile partner durum geçişi; /partner/{id}/status ile aynı kurallar."""
    return _apply_partner_status(db, order_id, partner, body.status, background, notifier)
