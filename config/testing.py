import os

SECRET_KEY = "test-secret"

GATEWAY_CONFIG = {
    "url": os.getenv("SUPABASE_URL", "http://localhost:54321"),
    "api_key": os.getenv("SUPABASE_ANON_KEY", "test-anon-key"),
    "timeout": float(os.getenv("REQUEST_TIMEOUT", "5")),
}

DEBUG = False
TESTING = True

LOG_LEVEL = "WARNING"
LOG_DIR = ""

NOTIFICATION_PAGE_SIZE = 50
SESSION_DAYS = 7
