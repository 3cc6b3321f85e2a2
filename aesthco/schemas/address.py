from pydantic import BaseModel, ConfigDict, Field, field_validator


def _required_text(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("This field is required.")
    return v


def _address_type(v: str) -> str:
    v = (v or "home").strip().lower()
    if v not in ("home", "work", "other"):
        raise ValueError("address_type must be home, work or other.")
    return v


class AddressCreate(BaseModel):
    name: str | None = Field(default=None, max_length=80)  # boşsa kullanıcının adı
    phone_number: str | None = Field(default=None, max_length=20)  # boşsa kullanıcının telefonu
    address_line1: str = Field(max_length=200)
    address_line2: str | None = Field(default=None, max_length=200)
    city: str
    state: str
    postal_code: str | None = Field(default=None, max_length=10)
    address_type: str = "home"
    is_default: bool = False

    @field_validator("address_line1", "city", "state")
    @classmethod
    def required_text(cls, v: str) -> str:
        return _required_text(v)

    @field_validator("address_type")
    @classmethod
    def known_type(cls, v: str) -> str:
        return _address_type(v)


class AddressUpdate(BaseModel):
    """Kısmi düzenleme; gönderilmeyen alan değişmez. is_default=false yok sayılır, varsayılan ancak başka adrese geçerek değişir."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=80)
    phone_number: str | None = Field(default=None, max_length=20)
    address_line1: str | None = Field(default=None, max_length=200)
    address_line2: str | None = Field(default=None, max_length=200)
    city: str | None = None
    state: str | None = None
    postal_code: str | None = Field(default=None, max_length=10)
    address_type: str | None = None
    is_default: bool | None = None

    @field_validator("address_line1", "city", "state", mode="before")
    @classmethod
    def required_text(cls, v):
        if v is None:
            raise ValueError("This field is required.")
        return _required_text(v) if isinstance(v, str) else v

    @field_validator("address_type")
    @classmethod
    def known_type(cls, v: str | None) -> str | None:
        return None if v is None else _address_type(v)


class AddressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone_number: str | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str | None = None
    address_type: str
    is_default: bool
