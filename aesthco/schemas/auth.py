from pydantic import BaseModel, EmailStr, field_validator


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: str = ""
    phone_number: str | None = None

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters.")
        return v

    @field_validator("phone_number")
    @classmethod
    def strip_phone(cls, v: str | None) -> str | None:
        return (v or "").strip() or None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: str
    phone_number: str | None = None
    role: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
