import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .db import SessionLocal, init_schema
from .errors import ServiceError, service_error_handler, request_validation_handler, http_error_handler
from .limiter import limiter
from .models import User, UserRole
from .routers import auth, guest
from .routers import admin_dashboard, admin_rooms, admin_reservations, admin_users
from .routers import admin_menu, admin_billing, admin_requests
from .security import hash_password

# --- Logging configuration ---
_level = logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level (useful under Docker Compose)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("hotel_portal.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, getattr(settings, "DEBUG", False))

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: rooms, reservations, billing and guest services.\n\n"
        "Admin endpoints live under /api/admin, guest endpoints under /api/guest. "
        "Authenticate with `Authorization: Bearer <token>` from /api/auth/signin."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _ensure_default_admin():
    db = SessionLocal()
    try:
        if db.query(User).filter(User.role == UserRole.ADMIN).first():
            return
        email = settings.ADMIN_EMAIL.strip().lower()
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.role = UserRole.ADMIN
        else:
            user = User(
                name=settings.ADMIN_NAME,
                email=email,
                password_hash=hash_password(settings.ADMIN_PASSWORD),
                role=UserRole.ADMIN,
            )
            db.add(user)
        db.commit()
        logger.info("Default admin user ensured (%s).", email)
    finally:
        db.close()


@app.on_event("startup")
def startup_event():
    """Runs startup tasks, like creating tables and ensuring a default admin exists."""
    logger.info("Running startup tasks...")
    if settings.AUTO_CREATE_SCHEMA:
        init_schema()
    _ensure_default_admin()
    logger.info("Startup tasks complete.")


# Add the limiter to the app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)

app.include_router(auth.router)
app.include_router(admin_dashboard.router)
app.include_router(admin_rooms.router)
app.include_router(admin_reservations.router)
app.include_router(admin_users.router)
app.include_router(admin_menu.router)
app.include_router(admin_billing.router)
app.include_router(admin_requests.router)
app.include_router(guest.router)


@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}
