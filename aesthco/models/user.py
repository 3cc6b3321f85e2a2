from datetime import datetime

from sqlmodel import Field, SQLModel


class UserRole:
    CUSTOMER = "customer"
    PARTNER = "partner"
    SUPER_ADMIN = "super-admin"

    ALL = (CUSTOMER, PARTNER, SUPER_ADMIN)


class User(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    full_name: str = ""
    phone_number: str | None = Field(default=None, index=True)
    role: str = Field(default=UserRole.CUSTOMER, index=True)  # customer | partner | super-admin
    is_active: bool = True
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
    last_login_at: datetime | None = None
