# ============================================================
# config.py — Configuration du service Booking
# ------------------------------------------------------------
# Toutes les valeurs viennent des variables d'environnement,
# avec des valeurs par défaut utilisables en développement.
# ============================================================
import logging
import os
import sys
from zoneinfo import ZoneInfo

# Base de données : SQLite en local, PostgreSQL en déploiement
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")

# Les dates sans timezone sont interprétées dans l'heure locale (Tenerife)
LOCAL_TZ = ZoneInfo(os.getenv("LOCAL_TZ", "Atlantic/Canary"))
CALENDAR_TZ = os.getenv("CALENDAR_TZ", "Europe/Madrid")

# Administration (secret partagé dans l'en-tête x-admin-password)
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "bookings@mandrycabrio.com")

# Email (API Resend)
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_FROM = os.getenv("EMAIL_FROM", "bookings@mandrycabrio.com")

# WhatsApp
WHATSAPP_PHONE = os.getenv("WHATSAPP_PHONE", "34692735125")
WHATSAPP_PROVIDER = os.getenv("WHATSAPP_PROVIDER", "")
WHATSAPP_API_KEY = os.getenv("WHATSAPP_API_KEY", "")
WHATSAPP_API_URL = os.getenv("WHATSAPP_API_URL", "https://waba-api.360dialog.io/v1/messages")

# Google Calendar (compte de service)
GOOGLE_CALENDAR_ID = os.getenv("GOOGLE_CALENDAR_ID", "")
GOOGLE_SERVICE_ACCOUNT_JSON = os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", "")

# Délais : chaque appel HTTP sortant, et l'attente globale des notifications
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "5"))
NOTIFY_TIMEOUT_SECONDS = float(os.getenv("NOTIFY_TIMEOUT_SECONDS", "10"))

# Anti-spam des avis : 2 minutes entre deux envois par IP
REVIEW_COOLDOWN_SECONDS = int(os.getenv("REVIEW_COOLDOWN_SECONDS", "120"))
RATE_LIMIT_MAX_ENTRIES = int(os.getenv("RATE_LIMIT_MAX_ENTRIES", "10000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def setup_logging(level: str = LOG_LEVEL):
    """Configure le logger racine (stdout, une ligne par événement)."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    root = logging.getLogger()
    root.setLevel(level)
    # évite les doublons si l'app est rechargée
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
