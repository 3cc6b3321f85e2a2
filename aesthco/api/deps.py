from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from aesthco.core.database import get_db
from aesthco.core.errors import Forbidden, Unauthorized
from aesthco.core.security import decode_access_token
from aesthco.models import User, UserRole

security = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> int:
    if not credentials:
        raise Unauthorized("Authentication required")
    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise Unauthorized("Invalid or expired token", code="invalid_token")
    return claims.user_id


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise Unauthorized("Account not found or inactive", code="inactive_user")
    return user


def require_roles(*roles: str):
    """Rol kontrolü: `user: User = Depends(require_roles(UserRole.PARTNER))`."""

    def _dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise Forbidden("You do not have permission to perform this action")
        return user

    return _dependency


require_customer = require_roles(UserRole.CUSTOMER)
require_partner = require_roles(UserRole.PARTNER)
require_super_admin = require_roles(UserRole.SUPER_ADMIN)
