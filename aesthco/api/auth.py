import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session, select

from aesthco.api.deps import get_current_user
from aesthco.core.database import get_db
from aesthco.core.errors import InvalidInput, Unauthorized
from aesthco.core.rate_limit import default_limit, limiter
from aesthco.core.security import create_access_token, hash_password, verify_password
from aesthco.models import User, UserRole
from aesthco.schemas import Token, UserCreate, UserLogin, UserResponse

log = logging.getLogger("aesthco.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        phone_number=user.phone_number,
        role=user.role,
    )


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit(default_limit)
def register(request: Request, body: UserCreate, db: Session = Depends(get_db)):
    """Sadece müşteri kaydı; partner ve super-admin seed/yönetim ile açılır."""
    email = body.email.strip().lower()
    if db.exec(select(User).where(User.email == email)).first():
        raise InvalidInput("This email address is already registered", code="email_taken")
    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        full_name=body.full_name.strip(),
        phone_number=body.phone_number,
        role=UserRole.CUSTOMER,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("user registered id=%s", user.id)
    return _user_response(user)


@router.post("/login", response_model=Token)
@limiter.limit(default_limit)
def login(request: Request, body: UserLogin, db: Session = Depends(get_db)):
    user = db.exec(select(User).where(User.email == body.email.strip().lower())).first()
    if not user or not verify_password(body.password, user.hashed_password):
        raise Unauthorized("Invalid email or password", code="invalid_credentials")
    if not user.is_active:
        raise Unauthorized("Account is inactive", code="inactive_user")
    user.last_login_at = datetime.utcnow()
    db.add(user)
    db.commit()
    token = create_access_token(user.id, user.role)
    return Token(access_token=token, role=user.role)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return _user_response(user)
