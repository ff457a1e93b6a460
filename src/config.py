"""Configuration module for Quiz Hub.

This module provides centralized configuration management, including directory
paths, database and API server settings, authentication parameters and the
field limits enforced by the validation layer. All runtime values can be
overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/quiz_hub.db"
)

# Echo SQL statements (set to "true" for debugging)
DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Authentication Configuration ---

# Lifetime of a sign-in session
SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "7"))

# Cookie carrying the opaque session token
SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "session")

# Mark the session cookie as secure (HTTPS only)
SESSION_COOKIE_SECURE: bool = (
    os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"
)

# scrypt cost parameters for new credentials
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
PASSWORD_KEYLEN = 64

# Bootstrap admin account used by the seed command
ADMIN_EMAIL: Optional[str] = os.getenv("ADMIN_EMAIL")
ADMIN_USERNAME: Optional[str] = os.getenv("ADMIN_USERNAME")
ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD")

# --- Leaderboard Configuration ---

LEADERBOARD_LIMIT: int = int(os.getenv("LEADERBOARD_LIMIT", "25"))

# Default scoring parameters
SCORE_MAX_TIME_MS: int = 30000
SCORE_TIME_BONUS_MAX: int = 50

# --- Field Limits ---

MAX_TITLE_LEN = 120
MAX_DESC_LEN = 500
MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 20
MIN_OPTION_COUNT = 2
MAX_OPTION_COUNT = 6
MAX_PROMPT_LEN = 240
MAX_OPTION_LEN = 140
MAX_USERNAME_LEN = 24
MAX_DISPLAY_NAME_LEN = 24
MAX_EMAIL_LEN = 120
MIN_PASSWORD_LEN = 8
MAX_PASSWORD_LEN = 128
MAX_CATEGORY_NAME_LEN = 40
MAX_CATEGORY_DESC_LEN = 160
MAX_REJECTION_LEN = 200
MAX_ID_LEN = 64
