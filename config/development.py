import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

GATEWAY_CONFIG = {
    "url": os.getenv("SUPABASE_URL", "http://localhost:54321"),
    "api_key": os.getenv("SUPABASE_ANON_KEY", ""),
    "timeout": float(os.getenv("REQUEST_TIMEOUT", "10")),
}

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
# Empty string disables the file handler.
LOG_DIR = os.getenv("LOG_DIR", ".local/logs")

NOTIFICATION_PAGE_SIZE = int(os.getenv("NOTIFICATION_PAGE_SIZE", "50"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
