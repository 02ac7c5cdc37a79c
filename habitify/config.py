import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DB_BACKEND = os.getenv("DB_BACKEND", "sqlite").lower()

# Default path if env var not set
DB_PATH = os.getenv("DATABASE_PATH", "data/habits.db")

MONGO_URI = os.getenv("MONGO_URI")

# Registrations with this email are granted admin access
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@habitify.local")

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_logging_configured = False


def setup_logging():
    """Configure the root logger once per process."""
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO), format=LOG_FORMAT)
    _logging_configured = True
