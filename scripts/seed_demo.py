#!/usr/bin/env python3
"""Demo verisi: katalog, super-admin, partner, kargo ayarı ve örnek kupon.
Proje kökünden: python3 scripts/seed_demo.py  (tekrar çalıştırmak güvenli; mevcut kayıtlar atlanır)"""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from sqlmodel import Session, select  # noqa: E402

from aesthco.core.database import engine, init_db  # noqa: E402
from aesthco.core.security import hash_password  # noqa: E402
from aesthco.models import (  # noqa: E402
    Color,
    Coupon,
    Product,
    ProductImage,
    ProductVariant,
    ShippingSetting,
    Size,
    User,
    UserRole,
)

USERS = [
    ("admin@aesthco.com", "admin12345", "Store Admin", UserRole.SUPER_ADMIN),
    ("partner@aesthco.com", "partner12345", "Delivery Partner", UserRole.PARTNER),
]
COLORS = [("Black", "#000000"), ("Ivory", "#FFFFF0")]
SIZES = [("S", "Small", 1), ("M", "Medium", 2), ("L", "Large", 3)]
# (isim, slug, taban fiyat paise, indirimli fiyat)
PRODUCTS = [
    ("Oversized Tee", "oversized-tee", 129900, 99900),
    ("Linen Shirt", "linen-shirt", 249900, None),
]


def _get_or_create(db: Session, model, lookup: dict, **values):
    row = db.exec(select(model).filter_by(**lookup)).first()
    if row:
        return row, False
    row = model(**lookup, **values)
    db.add(row)
    db.flush()
    return row, True


def seed(db: Session) -> None:
    for email, password, name, role in USERS:
        _, created = _get_or_create(
            db, User, {"email": email}, hashed_password=hash_password(password), full_name=name, role=role
        )
        if created:
            print(f"user {email} ({role})")

    colors = [_get_or_create(db, Color, {"name": n}, code=c)[0] for n, c in COLORS]
    sizes = [_get_or_create(db, Size, {"code": c}, label=lbl, sort_order=o)[0] for c, lbl, o in SIZES]

    for name, slug, base, sale in PRODUCTS:
        product, created = _get_or_create(db, Product, {"slug": slug}, name=name)
        if not created:
            continue
        for color in colors:
            db.add(
                ProductImage(
                    product_id=product.id,
                    color_id=color.id,
                    image_url=f"/static/products/{slug}-{color.name.lower()}.jpg",
                    is_primary=color is colors[0],
                )
            )
            for size in sizes:
                db.add(
                    ProductVariant(
                        product_id=product.id,
                        color_id=color.id,
                        size_id=size.id,
                        sku=f"{slug.upper()}-{color.name[:3].upper()}-{size.code}",
                        stock_quantity=25,
                        base_price=base,
                        sale_price=sale,
                    )
                )
        print(f"product {slug}")

    if not db.exec(select(ShippingSetting)).first():
        db.add(ShippingSetting(free_shipping_threshold=199900, shipping_fee=9900))
    _get_or_create(
        db,
        Coupon,
        {"code": "WELCOME10"},
        type="WELCOME",
        discount_type="PERCENT",
        discount_value=10,
        per_user_limit=1,
        max_discount_amount=50000,
    )
    db.commit()


if __name__ == "__main__":
    init_db()
    with Session(engine) as session:
        seed(session)
    print("seed done")
