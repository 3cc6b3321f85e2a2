from datetime import datetime

from sqlmodel import Field, SQLModel


class ShippingSetting(SQLModel, table=True):
    """Ücretsiz kargo eşiği ve sabit ücret; en yeni aktif kayıt geçerlidir."""

    id: int | None = Field(default=None, primary_key=True)
    free_shipping_threshold: int = 199900
    shipping_fee: int = 0
    is_active: bool = True
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
