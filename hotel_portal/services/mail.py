import logging
import requests
from ..config import settings

logger = logging.getLogger(__name__)

def send_admin_order_email(subject: str, body: str):
    """E-mails a new-order alert to the front desk address using the Mailgun API."""
    if not settings.ADMIN_NOTIFICATION_EMAIL_ENABLE or not settings.ADMIN_NOTIFICATION_EMAIL:
        return
    if not settings.MAILGUN_API_KEY or not settings.MAILGUN_DOMAIN:
        logger.warning("Mailgun API key or domain not configured. Skipping email.")
        return

    mailgun_url = f"https://api.mailgun.net/v3/{settings.MAILGUN_DOMAIN}/messages"
    auth = ("api", settings.MAILGUN_API_KEY)
    data = {
        "from": f"{settings.APP_NAME} <{settings.MAIL_FROM}>",
        "to": [settings.ADMIN_NOTIFICATION_EMAIL],
        "subject": subject,
        "text": body,
    }

    try:
        response = requests.post(mailgun_url, auth=auth, data=data, timeout=10)
        response.raise_for_status()
        logger.info(f"Order alert sent to {settings.ADMIN_NOTIFICATION_EMAIL} via Mailgun.")
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send order alert to {settings.ADMIN_NOTIFICATION_EMAIL} via Mailgun: {e}")
