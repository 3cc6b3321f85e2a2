"""Parola hash'i (bcrypt) ve erişim token'ı (HS256 JWT: sub = kullanıcı id, role = rol)."""
from dataclasses import dataclass
from datetime import datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from .config import settings

ALGORITHM = "HS256"
MAX_BCRYPT_BYTES = 72  # bcrypt 72 bayttan sonrasını yok sayar


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str | None
    expires_at: datetime | None = None


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_BCRYPT_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # bozuk / bcrypt olmayan hash
        return False


def create_access_token(user_id: int, role: str, expires_minutes: int | None = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    claims = {
        "sub": str(user_id),
        "role": role,
        "exp": datetime.utcnow() + timedelta(minutes=minutes),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenClaims | None:
    """Geçersiz imza, süresi dolmuş token veya sayısal olmayan sub: None."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub.isdigit():
        return None
    exp = payload.get("exp")
    return TokenClaims(
        user_id=int(sub),
        role=payload.get("role"),
        expires_at=datetime.utcfromtimestamp(exp) if isinstance(exp, (int, float)) else None,
    )
