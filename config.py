import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTH_DISABLED = bool(data.get("AUTH_DISABLED", False))
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Auth provider (hosted auth service issuing bearer tokens)
    AUTH_URL = data.get("AUTH_URL", "http://localhost:54321")
    AUTH_API_KEY = data.get("AUTH_API_KEY", "")
    ADMIN_EMAILS = [e.lower() for e in data.get("ADMIN_EMAILS", [])]

    # Payment gateway (Razorpay)
    RAZORPAY_API_URL = data.get("RAZORPAY_API_URL", "https://api.razorpay.com/v1")
    RAZORPAY_KEY_ID = data.get("RAZORPAY_KEY_ID", "")
    RAZORPAY_KEY_SECRET = data.get("RAZORPAY_KEY_SECRET", "")
    RAZORPAY_WEBHOOK_SECRET = data.get("RAZORPAY_WEBHOOK_SECRET", "")
    GATEWAY_TIMEOUT_SECONDS = float(data.get("GATEWAY_TIMEOUT_SECONDS", 10.0))

    # Transactional email (Resend)
    RESEND_API_URL = data.get("RESEND_API_URL", "https://api.resend.com")
    RESEND_API_KEY = data.get("RESEND_API_KEY", "")
    EMAIL_FROM = data.get("EMAIL_FROM", "Audiolyse <noreply@audiolyse.com>")
    EMAIL_REPLY_TO = data.get("EMAIL_REPLY_TO", "support@audiolyse.com")
    SITE_URL = data.get("SITE_URL", "https://audiolyse.vercel.app")

    # Invoicing
    COMPANY_NAME = data.get("COMPANY_NAME", "Audiolyse Technologies")
    COMPANY_ADDRESS = data.get("COMPANY_ADDRESS", ["Chennai, Tamil Nadu", "India - 600001"])
    COMPANY_EMAIL = data.get("COMPANY_EMAIL", "billing@audiolyse.com")
    COMPANY_GSTIN = data.get("COMPANY_GSTIN", None)
    GST_RATE = data.get("GST_RATE", 18)  # Percent, applied to INR payments only
    ANNUAL_DISCOUNT = data.get("ANNUAL_DISCOUNT", 0.20)

    # Dev convenience: create tables on startup (use migrations in production)
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", False))

    # Team management
    INVITATION_TTL_DAYS = data.get("INVITATION_TTL_DAYS", 7)

    # Ledger Reconciliation
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily
