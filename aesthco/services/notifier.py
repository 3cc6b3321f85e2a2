"""Commit sonrası bildirimler.

OrderNotifier adaptör sınırıdır: public metotlar asla istisna fırlatmaz, hatayı loglayıp
yutar. Sipariş, bildirim sonucundan bağımsız olarak yerleşmiş sayılır. Veri, istek
oturumu kapanmadan OrderSnapshot'a kopyalanır; notifier veritabanına dokunmaz.
"""
import logging
from dataclasses import dataclass

from aesthco.models import Order, OrderItem

from . import email_sender

log = logging.getLogger("aesthco.notify")


@dataclass(frozen=True)
class ItemSummary:
    name: str
    variant: str | None
    quantity: int
    total_price: int
    image_url: str | None = None


@dataclass(frozen=True)
class AddressSummary:
    name: str | None
    phone: str | None
    line1: str | None
    line2: str | None
    city: str | None
    state: str | None
    postal_code: str | None


@dataclass(frozen=True)
class OrderSnapshot:
    id: str
    status: str
    customer_name: str | None
    subtotal: int
    shipping_fee: int
    discount_amount: int
    total: int
    items: tuple[ItemSummary, ...] = ()
    address: AddressSummary | None = None


def snapshot_order(order: Order, items: list[OrderItem], customer_name: str | None = None) -> OrderSnapshot:
    return OrderSnapshot(
        id=order.id,
        status=order.status,
        customer_name=customer_name or order.address_name,
        subtotal=order.subtotal,
        shipping_fee=order.shipping_fee,
        discount_amount=order.discount_amount,
        total=order.total,
        items=tuple(
            ItemSummary(
                name=i.product_name,
                variant=" • ".join(p for p in (i.color_name, i.size_name) if p) or None,
                quantity=i.quantity,
                total_price=i.total_price,
                image_url=i.image_url,
            )
            for i in items
        ),
        address=AddressSummary(
            name=order.address_name,
            phone=order.address_phone,
            line1=order.address_line1,
            line2=order.address_line2,
            city=order.city,
            state=order.state,
            postal_code=order.postal_code,
        ),
    )


class OrderNotifier:
    """Temel sınıf: alt sınıflar _deliver_* metotlarını uygular, hata yönetimi burada."""

    def notify_order_status(self, order: OrderSnapshot, status: str, recipient_email: str | None) -> None:
        if not recipient_email:
            return
        try:
            self._deliver_order_status(order, status, recipient_email)
        except Exception:
            log.exception("order status notification failed order=%s status=%s", order.id, status)

    def notify_partners_new_order(self, order: OrderSnapshot, partner_emails: list[str]) -> None:
        for email in partner_emails:
            if not email:
                continue
            try:
                self._deliver_partner_new_order(order, email)
            except Exception:
                log.exception("partner new-order notification failed order=%s to=%s", order.id, email)

    def notify_partner_cancelled(self, order: OrderSnapshot, partner_email: str | None) -> None:
        if not partner_email:
            return
        try:
            self._deliver_partner_cancelled(order, partner_email)
        except Exception:
            log.exception("partner cancel notification failed order=%s", order.id)

    def notify_partner_delivery_code(self, order_id: str, partner_email: str | None, code: str) -> None:
        if not partner_email:
            return
        try:
            self._deliver_partner_delivery_code(order_id, partner_email, code)
        except Exception:
            log.exception("delivery code notification failed order=%s", order_id)

    def _deliver_order_status(self, order: OrderSnapshot, status: str, to: str) -> None:
        raise NotImplementedError

    def _deliver_partner_new_order(self, order: OrderSnapshot, to: str) -> None:
        raise NotImplementedError

    def _deliver_partner_cancelled(self, order: OrderSnapshot, to: str) -> None:
        raise NotImplementedError

    def _deliver_partner_delivery_code(self, order_id: str, to: str, code: str) -> None:
        raise NotImplementedError


class EmailOrderNotifier(OrderNotifier):
    def _deliver_order_status(self, order, status, to):
        subject, html = email_sender.build_order_status_email(order, status)
        email_sender.send_order_email(to, subject, html)

    def _deliver_partner_new_order(self, order, to):
        subject, html = email_sender.build_partner_new_order_email(order)
        email_sender.send_order_email(to, subject, html)

    def _deliver_partner_cancelled(self, order, to):
        subject, html = email_sender.build_partner_cancelled_email(order)
        email_sender.send_order_email(to, subject, html)

    def _deliver_partner_delivery_code(self, order_id, to, code):
        subject, html = email_sender.build_partner_delivery_code_email(order_id, code)
        email_sender.send_order_email(to, subject, html)


_default_notifier = EmailOrderNotifier()


def get_notifier() -> OrderNotifier:
    """FastAPI dependency; testler app.dependency_overrides ile değiştirir."""
    return _default_notifier
