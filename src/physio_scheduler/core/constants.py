"""Scheduling constants and configuration values."""

# Base slot length in minutes. Every bookable interval is a whole number of slots.
SLOT_MINUTES = 20

# Allowed appointment lengths: 1, 2 or 3 consecutive base slots
ALLOWED_DURATIONS = (20, 40, 60)

# Maximum cumulative booked minutes a single patient may hold on one day
MAX_DAILY_MINUTES_PER_PATIENT = 60

# Insert attempts before a repeated unique-index conflict surfaces as ProviderConflictError
MAX_BOOKING_ATTEMPTS = 3

# Boundary formats
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

# Database field lengths
MAX_ID_LENGTH = 64
MAX_NOTES_LENGTH = 1000

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes
