from typing import Optional
from passlib.context import CryptContext
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from fastapi import Request, Depends, HTTPException
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .models import User, UserRole

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="hotel-portal-token")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def issue_token(user: User) -> str:
    return serializer.dumps({"uid": user.id, "role": user.role.value})


def read_token(token: str) -> Optional[int]:
    """Returns the user id carried by a valid, unexpired token."""
    try:
        data = serializer.loads(token, max_age=settings.TOKEN_MAX_AGE_DAYS * 24 * 60 * 60)
        return int(data.get("uid"))
    except (BadSignature, SignatureExpired, ValueError, TypeError, AttributeError):
        return None


def _bearer_token(request: Request) -> str:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[len("Bearer "):].strip()
    return ""


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Dependency to protect routes that require a signed-in user.
    Missing, tampered or expired tokens and deleted or deactivated users all map to 401.
    """
    token = _bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Missing token")
    user_id = read_token(token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user


def require_role(role: UserRole):
    """Builds a dependency that admits only users holding `role`."""

    def dependency(user: User = Depends(require_user)) -> User:
        if user.role is not role:
            raise HTTPException(
                status_code=403,
                detail=f"Access denied. {role.value.title()} privileges required.",
            )
        return user

    return dependency


require_admin = require_role(UserRole.ADMIN)
require_guest = require_role(UserRole.GUEST)
