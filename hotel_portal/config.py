import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    APP_NAME: str = "Hotel Portal"
    # Core settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Auth tokens
    TOKEN_MAX_AGE_DAYS: int = int(os.getenv("TOKEN_MAX_AGE_DAYS", "7"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./hotel_portal.db")
    AUTO_CREATE_SCHEMA: bool = os.getenv("AUTO_CREATE_SCHEMA", "true").lower() == "true"

    # CORS: single or comma-separated origins
    CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGIN", "*").split(",") if o.strip()]

    # Default admin bootstrap
    ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Administrator")
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@hotel.local")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin12345")
    ADMIN_NOTIFICATION_EMAIL: str = os.getenv("ADMIN_NOTIFICATION_EMAIL", "")
    ADMIN_NOTIFICATION_EMAIL_ENABLE: bool = os.getenv("ADMIN_NOTIFICATION_EMAIL_ENABLE", "false").lower() == "true"

    # Mail Settings (Mailgun)
    MAIL_FROM: str = os.getenv("MAIL_FROM", "noreply@hotel.local")
    MAILGUN_API_KEY: str = os.getenv("MAILGUN_API_KEY", "")
    MAILGUN_DOMAIN: str = os.getenv("MAILGUN_DOMAIN", "")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_AUTH: str = os.getenv("RATE_LIMIT_AUTH", "10/minute")

settings = Settings()
