"""Adres defteri: sipariş anında adresin kopyası siparişe yazılır, sonraki düzenlemeler siparişi etkilemez."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class UserAddress(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    name: str = Field(max_length=80)
    phone_number: str | None = Field(default=None, max_length=20)
    address_line1: str = Field(max_length=200)
    address_line2: str | None = Field(default=None, max_length=200)
    city: str
    state: str
    postal_code: str | None = Field(default=None, max_length=10)
    address_type: str = "home"  # home | work | other
    is_default: bool = False
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
