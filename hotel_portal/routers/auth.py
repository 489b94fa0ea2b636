import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import ValidationFailed
from ..limiter import limiter
from ..models import User, UserRole
from ..schemas import SignupIn, SigninIn, TokenOut, UserOut
from ..security import hash_password, verify_password, issue_token, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=TokenOut, status_code=201)
@limiter.limit(settings.RATE_LIMIT_AUTH)
def signup(request: Request, payload: SignupIn, db: Session = Depends(get_db)):
    """Self-service registration. Always creates a guest account."""
    email = payload.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ValidationFailed({"email": "Email already registered"}, message="Email already registered")

    user = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        role=UserRole.GUEST,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("New guest account %s (%s)", user.id, user.email)
    return {"token": issue_token(user), "user": user}


@router.post("/signin", response_model=TokenOut)
@limiter.limit(settings.RATE_LIMIT_AUTH)
def signin(request: Request, payload: SigninIn, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning("Failed sign-in for %s", email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"token": issue_token(user), "user": user}


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(require_user)):
    return user
