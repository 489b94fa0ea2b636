import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFound, ValidationFailed
from ..models import User
from ..schemas import UserCreateIn, UserUpdateIn, UserOut
from ..security import hash_password, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/users", tags=["admin-users"], dependencies=[Depends(require_admin)])

# Accounts created by staff without a password get this one until the guest changes it
DEFAULT_PASSWORD = "changeme123"


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def _ensure_unique_email(db: Session, email: str, user_id: int | None = None):
    q = db.query(User).filter(User.email == email)
    if user_id is not None:
        q = q.filter(User.id != user_id)
    if q.first():
        raise ValidationFailed({"email": "Email already in use"}, message="Email already in use")


@router.get("", response_model=List[UserOut])
def users_index(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.id.asc()).all()


@router.post("", response_model=UserOut, status_code=201)
def users_create(payload: UserCreateIn, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    _ensure_unique_email(db, email)
    user = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password or DEFAULT_PASSWORD),
        role=payload.role,
        staff_role=payload.staff_role or None,
        is_active=payload.is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s created with role %s", user.id, user.role.value)
    return user


@router.put("/{user_id}", response_model=UserOut)
def users_update(user_id: int, payload: UserUpdateIn, db: Session = Depends(get_db)):
    user = _get_user(db, user_id)
    if payload.name:
        user.name = payload.name.strip()
    if payload.email:
        email = payload.email.strip().lower()
        _ensure_unique_email(db, email, user.id)
        user.email = email
    if payload.role is not None:
        user.role = payload.role
    if payload.staff_role is not None:
        user.staff_role = payload.staff_role or None
    if payload.is_active is not None:
        user.is_active = payload.is_active
    if payload.password:
        user.password_hash = hash_password(payload.password)
    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=204)
def users_delete(user_id: int, db: Session = Depends(get_db)):
    user = _get_user(db, user_id)
    db.delete(user)
    db.commit()
    return Response(status_code=204)
