"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Slug generation
MAX_SLUG_LENGTH = 63

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_IPV6_LENGTH = 45
MAX_USER_AGENT_LENGTH = 512
MAX_REGISTRATION_LENGTH = 32
MAX_ACTION_TYPE_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 500

# Pagination defaults
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

# Secret key requirements
ACCESS_TOKEN_JTI_LENGTH = 16
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"

# Compliance defaults
DEFAULT_TIMEZONE = "Australia/Perth"
DEFAULT_SIGN_OFF_WEEKDAY = 5  # Friday, 0=Sunday
DEFAULT_OVERDUE_MINUTES = 120
DEFAULT_LIVE_WINDOW_MINUTES = 180
DEFAULT_RETENTION_DAYS = 365
DEFAULT_MAX_USERS = 20
DEFAULT_MAX_VEHICLES = 20
DEFAULT_MAX_QUESTIONS = 10

# Optimistic concurrency
MAX_TRANSITION_ATTEMPTS = 3

# Local hours at which scheduled work fires
EXPORT_LOCAL_HOUR = 0
RETENTION_LOCAL_HOUR = 2

DEFAULT_CHECKLIST_QUESTIONS = [
    "Is the vehicle clean and free from contamination?",
    "Is the refrigeration unit operating correctly?",
    "Are all temperature loggers calibrated and working?",
    "Is the load secured and not exceeding capacity?",
    "Are all seals and door gaskets intact?",
]
