"""Sipariş yaşam döngüsü: açık geçiş tablosu ve koruma kuralları.

İleri atlamalar serbest (PLACED -> DELIVERED gibi); geri dönüş ve terminal
durumlardan çıkış IllegalTransition. Aynı duruma tekrar geçiş partner için
no-op'tur (bildirimi yeniden tetikler).
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime

from sqlmodel import Session, select

from aesthco.core.errors import Forbidden, IllegalTransition, OrderNotCancellable, OrderNotFound
from aesthco.models import Order, OrderItem
from aesthco.models.order import OrderStatus, PaymentStatus

log = logging.getLogger("aesthco.orders")

S = OrderStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    S.PLACED: frozenset({S.CONFIRMED, S.PACKED, S.OUT_FOR_DELIVERY, S.DELIVERED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.PACKED, S.OUT_FOR_DELIVERY, S.DELIVERED, S.CANCELLED}),
    S.PACKED: frozenset({S.OUT_FOR_DELIVERY, S.DELIVERED, S.CANCELLED}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED}),
    S.DELIVERED: frozenset({S.RETURN_REQUESTED}),
    S.RETURN_REQUESTED: frozenset({S.RETURNED}),
    S.CANCELLED: frozenset(),
    S.RETURNED: frozenset(),
}

CUSTOMER_CANCELLABLE = frozenset({S.PLACED, S.CONFIRMED})


def can_transition(current: OrderStatus | str, target: OrderStatus | str) -> bool:
    return OrderStatus(target) in TRANSITIONS[OrderStatus(current)]


def is_terminal(status: OrderStatus | str) -> bool:
    return not TRANSITIONS[OrderStatus(status)]


def check_transition(current: OrderStatus | str, target: OrderStatus | str, allow_same: bool = False) -> None:
    current, target = OrderStatus(current), OrderStatus(target)
    if allow_same and current == target:
        return
    if not can_transition(current, target):
        raise IllegalTransition(f"Cannot move order from {current.value} to {target.value}")


def customer_can_cancel(status: OrderStatus | str) -> bool:
    return OrderStatus(status) in CUSTOMER_CANCELLABLE


def partner_can_act(order: Order, partner_id: int) -> bool:
    return order.assigned_partner_id is None or order.assigned_partner_id == partner_id


def payment_status_after(target: OrderStatus | str, current: str) -> str:
    """Kapıda ödeme: teslimde tahsil edildi, iptalde iptal; diğerlerinde değişmez."""
    target = OrderStatus(target)
    if target == S.DELIVERED:
        return PaymentStatus.PAID.value
    if target == S.CANCELLED:
        return PaymentStatus.CANCELLED.value
    return current


def generate_delivery_code() -> str:
    """6 haneli teslimat kodu; saklanmaz, sadece partnere e-postayla gider."""
    return f"{secrets.randbelow(10**6):06d}"


@dataclass
class StatusChange:
    order: Order
    previous_status: str
    delivery_code: str | None = None


def get_order(db: Session, order_id: str, lock: bool = False) -> Order:
    stmt = select(Order).where(Order.id == order_id)
    if lock:
        stmt = stmt.with_for_update()
    order = db.exec(stmt).first()
    if not order:
        raise OrderNotFound()
    return order


def get_customer_order(db: Session, order_id: str, user_id: int, lock: bool = False) -> Order:
    order = get_order(db, order_id, lock=lock)
    if order.user_id != user_id:
        raise OrderNotFound()
    return order


def get_items(db: Session, order_id: str) -> list[OrderItem]:
    return list(db.exec(select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)).all())


def list_customer_orders(db: Session, user_id: int) -> list[Order]:
    stmt = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc())
    return list(db.exec(stmt).all())


def list_orders(db: Session, status: str | None = None) -> list[Order]:
    stmt = select(Order).order_by(Order.created_at.desc())
    if status:
        stmt = stmt.where(Order.status == status)
    return list(db.exec(stmt).all())


def _touch(order: Order) -> None:
    order.updated_at = datetime.utcnow()


def cancel_by_customer(db: Session, order_id: str, user_id: int) -> Order:
    """Sadece PLACED / CONFIRMED iptal edilebilir; aksi halde OrderNotCancellable (409)."""
    order = get_customer_order(db, order_id, user_id, lock=True)
    if not customer_can_cancel(order.status):
        raise OrderNotCancellable()
    order.status = S.CANCELLED.value
    order.payment_status = PaymentStatus.CANCELLED.value
    _touch(order)
    db.add(order)
    db.commit()
    db.refresh(order)
    log.info("order cancelled by customer id=%s user_id=%s", order.id, user_id)
    return order


def accept_by_partner(db: Session, order_id: str, partner_id: int) -> Order:
    order = get_order(db, order_id, lock=True)
    if not partner_can_act(order, partner_id):
        raise Forbidden("Order is assigned to another partner", code="order_assigned_elsewhere")
    if order.assigned_partner_id is None:
        order.assigned_partner_id = partner_id
        _touch(order)
        db.add(order)
        db.commit()
        db.refresh(order)
        log.info("order accepted id=%s partner_id=%s", order.id, partner_id)
    else:
        db.rollback()
    return order


def update_status_by_partner(
    db: Session,
    order_id: str,
    partner_id: int,
    target: OrderStatus | str,
) -> StatusChange:
    """İlk işlem siparişi partnere atar. DELIVERED sonrası teslimat kodu üretilir."""
    target = OrderStatus(target)
    order = get_order(db, order_id, lock=True)
    if not partner_can_act(order, partner_id):
        raise Forbidden("Order is assigned to another partner", code="order_assigned_elsewhere")
    previous = order.status
    check_transition(previous, target, allow_same=True)

    order.status = target.value
    order.payment_status = payment_status_after(target, order.payment_status)
    if order.assigned_partner_id is None:
        order.assigned_partner_id = partner_id
    _touch(order)
    db.add(order)
    db.commit()
    db.refresh(order)
    log.info("order status id=%s %s -> %s partner_id=%s", order.id, previous, target.value, partner_id)

    code = generate_delivery_code() if target == S.DELIVERED else None
    return StatusChange(order=order, previous_status=previous, delivery_code=code)
