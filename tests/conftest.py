"""Pytest fixtures: test client, temiz in-memory DB, veri fabrikası, kaydedici notifier."""
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel

# Test ortamında in-memory SQLite (app import edilmeden önce set edilmeli)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SMTP_HOST", "")
# Rate limit yüksek olsun ki tüm testler geçebilsin
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")
os.environ.setdefault("RATE_LIMIT_CHECKOUT_PER_MINUTE", "10000")

from aesthco.core import database  # noqa: E402
from aesthco.core.rate_limit import limiter  # noqa: E402
from aesthco.core.security import create_access_token, hash_password  # noqa: E402
from aesthco.main import app  # noqa: E402
from aesthco.models import (  # noqa: E402
    CartItem,
    Color,
    Coupon,
    Product,
    ProductImage,
    ProductVariant,
    ShippingSetting,
    Size,
    User,
    UserAddress,
    UserRole,
)
from aesthco.services.notifier import OrderNotifier, get_notifier  # noqa: E402

PASSWORD = "secret123"
_PASSWORD_HASH = hash_password(PASSWORD)


class RecordingNotifier(OrderNotifier):
    """Gönderim yerine çağrıları kaydeder."""

    def __init__(self):
        self.calls: list[tuple] = []

    def kinds(self) -> list[str]:
        return [c[0] for c in self.calls]

    def _deliver_order_status(self, order, status, to):
        self.calls.append(("status", order.id, status, to))

    def _deliver_partner_new_order(self, order, to):
        self.calls.append(("new_order", order.id, to))

    def _deliver_partner_cancelled(self, order, to):
        self.calls.append(("cancelled", order.id, to))

    def _deliver_partner_delivery_code(self, order_id, to, code):
        self.calls.append(("delivery_code", order_id, to, code))


class FailingNotifier(OrderNotifier):
    def _deliver_order_status(self, order, status, to):
        raise RuntimeError("smtp down")

    def _deliver_partner_new_order(self, order, to):
        raise RuntimeError("smtp down")

    def _deliver_partner_cancelled(self, order, to):
        raise RuntimeError("smtp down")

    def _deliver_partner_delivery_code(self, order_id, to, code):
        raise RuntimeError("smtp down")


class Factory:
    """Test verisi; her çağrı kendi oturumunda commit eder ve ayrık nesne döner."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def _save(self, *rows):
        with Session(self.engine, expire_on_commit=False) as s:
            for row in rows:
                s.add(row)
            s.commit()
        return rows[0] if len(rows) == 1 else rows

    def user(self, role: str = UserRole.CUSTOMER, email: str | None = None, phone: str | None = None,
             full_name: str = "Test User", is_active: bool = True) -> User:
        n = self._next()
        return self._save(
            User(
                email=email or f"{role}{n}@example.com",
                hashed_password=_PASSWORD_HASH,
                full_name=full_name,
                phone_number=phone,
                role=role,
                is_active=is_active,
            )
        )

    def headers(self, user: User) -> dict:
        token = create_access_token(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    def address(self, user: User, **kw) -> UserAddress:
        values = dict(
            name="Asha Rao",
            phone_number="+919800000001",
            address_line1="12 MG Road",
            address_line2="Flat 4",
            city="Bengaluru",
            state="KA",
            postal_code="560001",
        )
        values.update(kw)
        return self._save(UserAddress(user_id=user.id, **values))

    def color(self, name: str | None = None) -> Color:
        return self._save(Color(name=name or f"Color{self._next()}"))

    def size(self, code: str | None = None, label: str | None = None) -> Size:
        return self._save(Size(code=code or f"S{self._next()}", label=label))

    def product(self, name: str = "Oversized Tee", is_active: bool = True) -> Product:
        n = self._next()
        return self._save(Product(name=name, slug=f"product-{n}", is_active=is_active))

    def variant(self, product: Product, price: int = 50000, sale_price: int | None = None, stock: int = 10,
                color: Color | None = None, size: Size | None = None, is_available: bool = True) -> ProductVariant:
        return self._save(
            ProductVariant(
                product_id=product.id,
                color_id=color.id if color else None,
                size_id=size.id if size else None,
                sku=f"SKU-{self._next()}",
                stock_quantity=stock,
                base_price=price,
                sale_price=sale_price,
                is_available=is_available,
            )
        )

    def image(self, product: Product, url: str, color: Color | None = None) -> ProductImage:
        return self._save(ProductImage(product_id=product.id, image_url=url, color_id=color.id if color else None))

    def cart_item(self, user: User, product: Product, quantity: int = 1,
                  color: Color | None = None, size: Size | None = None) -> CartItem:
        return self._save(
            CartItem(
                user_id=user.id,
                product_id=product.id,
                color_id=color.id if color else None,
                size_id=size.id if size else None,
                quantity=quantity,
            )
        )

    def purchasable(self, user: User, price: int = 50000, quantity: int = 2):
        """Tek satırlı sepet: (product, variant)."""
        product = self.product()
        variant = self.variant(product, price=price)
        self.cart_item(user, product, quantity=quantity)
        return product, variant

    def shipping(self, threshold: int = 199900, fee: int = 9900) -> ShippingSetting:
        return self._save(ShippingSetting(free_shipping_threshold=threshold, shipping_fee=fee))

    def coupon(self, code: str = "SAVE10", discount_type: str = "PERCENT", value: int = 10, **kw) -> Coupon:
        return self._save(Coupon(code=code, discount_type=discount_type, discount_value=value, **kw))


@pytest.fixture(autouse=True)
def clean_db():
    """Her test boş şema ile başlar."""
    SQLModel.metadata.drop_all(database.engine)
    database.init_db()
    limiter.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def notifier():
    rec = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: rec
    return rec


@pytest.fixture
def failing_notifier(notifier):
    """Tüm gönderimler hata fırlatır; notifier fixture'ının yerine geçer."""
    failing = FailingNotifier()
    app.dependency_overrides[get_notifier] = lambda: failing
    return failing


@pytest.fixture(scope="function")
def client(notifier):
    """TestClient; lifespan ile in-memory DB ve tablolar hazır olur."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def factory() -> Factory:
    return Factory(database.engine)


@pytest.fixture
def db():
    with Session(database.engine) as session:
        yield session


@pytest.fixture
def file_engine(tmp_path) -> Engine:
    """Thread'li eşzamanlılık testleri için dosya tabanlı SQLite."""
    eng = database.build_engine(f"sqlite:///{tmp_path / 'concurrency.db'}")
    database.init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def file_factory(file_engine) -> Factory:
    return Factory(file_engine)
