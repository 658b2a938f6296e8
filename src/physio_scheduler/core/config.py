"""
Application configuration using python-dotenv.

This module loads environment variables from .env file into os.environ
for use throughout the scheduling engine.
"""

import os
import pathlib
from dotenv import load_dotenv


# Determine if we're running in a test environment
# Don't load .env file during testing to ensure predictable test behavior
is_testing = os.getenv("PYTEST_VERSION") is not None or "PYTEST_CURRENT_TEST" in os.environ

# Load .env file into os.environ (only outside of testing)
if not is_testing:
    possible_paths = [
        pathlib.Path.cwd() / ".env",  # .env in current directory
        pathlib.Path.cwd().parent / ".env",  # .env in parent directory
    ]

    for env_path in possible_paths:
        if env_path.exists():
            load_dotenv(env_path)
            break


# Configuration constants with defaults
def get_database_url() -> str:
    """Get the database URL from environment."""
    return os.getenv(
        "DATABASE_URL",
        "sqlite:///./appointment_service.db"
    )


DATABASE_URL = get_database_url()

# Clinic-wide working window (HH:MM, 24-hour). Applies to every provider.
CLINIC_OPEN_TIME = os.getenv("CLINIC_OPEN_TIME", "08:00")
CLINIC_CLOSE_TIME = os.getenv("CLINIC_CLOSE_TIME", "18:00")

# Concurrency
BOOKING_LOCK_TIMEOUT_SECONDS = float(os.getenv("BOOKING_LOCK_TIMEOUT_SECONDS", "10"))
DB_BUSY_TIMEOUT_SECONDS = float(os.getenv("DB_BUSY_TIMEOUT_SECONDS", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
