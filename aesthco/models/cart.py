from datetime import datetime

from sqlmodel import Field, SQLModel


class CartItem(SQLModel, table=True):
    """Sepet satırı: (user, product, color, size) başına bir satır; checkout başarılı olunca toplu silinir."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    product_id: int = Field(foreign_key="product.id")
    color_id: int | None = Field(default=None, foreign_key="color.id")
    size_id: int | None = Field(default=None, foreign_key="size.id")
    quantity: int = 1
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
