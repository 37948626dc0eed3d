import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

GATEWAY_CONFIG = {
    "url": os.getenv("SUPABASE_URL", ""),
    "api_key": os.getenv("SUPABASE_ANON_KEY", ""),
    "timeout": float(os.getenv("REQUEST_TIMEOUT", "10")),
}

DEBUG = False

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "")

NOTIFICATION_PAGE_SIZE = int(os.getenv("NOTIFICATION_PAGE_SIZE", "50"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
