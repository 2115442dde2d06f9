import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./shopsite.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Fernet key for the client deployment service-role key
# (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")
# Falls back to a key derived from SECRET_KEY when unset
CREDENTIALS_ENCRYPTION_KEY = os.getenv("CREDENTIALS_ENCRYPTION_KEY")

# Supabase identity provider
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")

# Frontend base URL for CORS and email links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

BUSINESS_NAME = os.getenv("BUSINESS_NAME", "Krishna Tech Solutions")
BUSINESS_PHONE = os.getenv("BUSINESS_PHONE", "+91 98765 43210")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", f"{BUSINESS_NAME} <onboarding@resend.dev>")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")

# Twilio SMS Configuration
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")
ADMIN_PHONE_NUMBER = os.getenv("ADMIN_PHONE_NUMBER")

# Public booking window (days ahead of today)
BOOKING_WINDOW_DAYS = int(os.getenv("BOOKING_WINDOW_DAYS", "30"))

# Rate limiting - requests per window for public booking endpoints
BOOKING_RATE_LIMIT = int(os.getenv("BOOKING_RATE_LIMIT", "10"))
BOOKING_RATE_WINDOW_SECONDS = int(os.getenv("BOOKING_RATE_WINDOW_SECONDS", "60"))

# Business-local timezone for "today" in the booking calendar
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Asia/Kolkata")
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
