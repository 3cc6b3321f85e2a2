"""Sipariş numarası: OD20251, OD20252, ...

Tek satırlık OrderSequence sayacı checkout transaction'ı içinde atomik UPDATE ile
artırılır; satır kilidi eşzamanlı checkout'ları sadece numara tahsisinde sıraya koyar.
Order.id birincil anahtar olduğu için çakışma IntegrityError olarak yakalanır ve
orkestratör transaction'ı baştan dener.
"""
from sqlalchemy import select, update
from sqlmodel import Session

from aesthco.core.config import settings
from aesthco.models import Order, OrderSequence

SEQUENCE_NAME = "order_id"


def parse_suffix(order_id: str | None, prefix: str | None = None) -> int | None:
    prefix = prefix or settings.order_id_prefix
    if not order_id or not order_id.startswith(prefix):
        return None
    tail = order_id[len(prefix):]
    return int(tail) if tail.isdigit() else None


def format_order_id(value: int) -> str:
    return f"{settings.order_id_prefix}{value}"


def highest_assigned(db: Session) -> int:
    """Mevcut siparişlerdeki en büyük sayısal son ek; yoksa floor - 1."""
    prefix = settings.order_id_prefix
    best = settings.order_id_floor - 1
    for (order_id,) in db.execute(select(Order.id).where(Order.id.like(f"{prefix}%"))):
        n = parse_suffix(order_id, prefix)
        if n is not None and n > best:
            best = n
    return best


def next_order_id(db: Session) -> str:
    """Çağıranın transaction'ı içinde çalışır; commit etmez."""
    stmt = (
        update(OrderSequence)
        .where(OrderSequence.name == SEQUENCE_NAME)
        .values(last_value=OrderSequence.last_value + 1)
        .returning(OrderSequence.last_value)
    )
    value = db.execute(stmt).scalar_one_or_none()
    if value is None:
        # İlk sipariş veya sayaç satırı yok: mevcut siparişlerden tohumla
        value = highest_assigned(db) + 1
        db.add(OrderSequence(name=SEQUENCE_NAME, last_value=value))
        db.flush()
    elif db.get(Order, format_order_id(value)) is not None:
        # Sayaç geride kalmış (elle eklenen sipariş, eski veri): ileri sar
        value = highest_assigned(db) + 1
        db.execute(
            update(OrderSequence).where(OrderSequence.name == SEQUENCE_NAME).values(last_value=value)
        )
    return format_order_id(value)
