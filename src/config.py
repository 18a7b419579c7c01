"""Configuration module for the Mustang Stride tracker.

This module provides centralized configuration management, including directory
paths, durable store settings, API server settings, and application defaults.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory (can be overridden via DATA_DIR env var)
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))

# --- Durable Store Configuration ---

# SQLite file holding the persisted collections
STATE_DB_PATH = Path(os.getenv("STATE_DB_PATH", str(DATA_DIR / "tracker_state.db")))

# Prefix applied to every durable key
STATE_KEY_PREFIX: str = os.getenv("STATE_KEY_PREFIX", "research_")

# Logical keys of the persisted collections
SESSION_USER_KEY = "session_user"
USERS_KEY = "users"
ASSIGNMENTS_KEY = "assignments"
SUBMISSIONS_KEY = "submissions"

STATE_KEYS: List[str] = [
    SESSION_USER_KEY,
    USERS_KEY,
    ASSIGNMENTS_KEY,
    SUBMISSIONS_KEY,
]

# Stored names that differ from the logical key
DURABLE_NAMES = {SESSION_USER_KEY: "user"}

# --- Time Configuration ---

# Timezone used for due dates entered without an offset (datetime-local form values)
LOCAL_TIMEZONE: str = os.getenv("LOCAL_TIMEZONE", "UTC")

# --- Authentication Configuration ---

# How long a failed login keeps the error flag raised
LOGIN_ERROR_DISPLAY_SECONDS: float = float(
    os.getenv("LOGIN_ERROR_DISPLAY_SECONDS", "3")
)

# Credential verification scheme: "plaintext" or "bcrypt"
CREDENTIAL_SCHEME: str = os.getenv("CREDENTIAL_SCHEME", "plaintext").lower()

# Subject stamped on assignments from teachers without one
DEFAULT_SUBJECT: str = "General"

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def durable_key(key: str) -> str:
    """Return the key under which a logical collection is stored, e.g. "research_user"."""
    return f"{STATE_KEY_PREFIX}{DURABLE_NAMES.get(key, key)}"
