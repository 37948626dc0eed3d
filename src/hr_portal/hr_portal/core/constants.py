"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_NOTIFICATION_LIMIT = 50
DEFAULT_RECENT_TASKS = 5
PASSWORD_MIN_LENGTH = 6

# Fixed work factor for application-level password hashes.
PASSWORD_HASH_METHOD = "pbkdf2:sha256:600000"

LOGIN_PATH = "/login"
REGISTER_PATH = "/register"
ADMIN_DASHBOARD_PATH = "/dashboard"
EMPLOYEE_DASHBOARD_PATH = "/employee-dashboard"
ADMIN_ONLY_PATHS = frozenset({"/employees", "/departments", "/attendance", "/location-attendance"})

USERS_TABLE = "users"
TASKS_TABLE = "tasks"
NOTIFICATIONS_TABLE = "notifications"
LEAVES_TABLE = "leaves"
