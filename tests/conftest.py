import os

# Base en mémoire et aucun service externe pendant les tests.
# Doit être fait avant le premier import de config.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_PASSWORD"] = "test-admin"
os.environ["RESEND_API_KEY"] = ""
os.environ["WHATSAPP_PROVIDER"] = ""
os.environ["WHATSAPP_API_KEY"] = ""
os.environ["GOOGLE_CALENDAR_ID"] = ""
os.environ["GOOGLE_SERVICE_ACCOUNT_JSON"] = ""
