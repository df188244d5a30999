"""
Resort booking backend configuration
Values are read from the environment (.env supported via python-dotenv)
"""
import os
from decimal import Decimal
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# Database
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME")


def get_database_url() -> str:
    """DATABASE_URL wins; otherwise PostgreSQL from DB_* vars, else a local SQLite file"""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if DB_HOST and DB_NAME:
        return f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    return "sqlite:///./resort_bookings.db"


# Pricing
VAT_RATE = Decimal(os.getenv("VAT_RATE", "0.025"))  # 2.5% statutory rate
VAT_SETTLEMENT_QUANTUM = Decimal(os.getenv("VAT_SETTLEMENT_QUANTUM", "1"))
CURRENCY = os.getenv("CURRENCY", "BDT")

# Resort
RESORT_NAME = os.getenv("RESORT_NAME", "Bonsai Eco Village")
RESORT_TIMEZONE = os.getenv("RESORT_TIMEZONE", "Asia/Dhaka")
DEFAULT_CHECK_IN_TIME = os.getenv("DEFAULT_CHECK_IN_TIME", "14:00")
DEFAULT_CHECK_OUT_TIME = os.getenv("DEFAULT_CHECK_OUT_TIME", "12:00")

# Authorization
ADMIN_EMAILS = [email.lower() for email in _split_csv(os.getenv("ADMIN_EMAILS", ""))]

# HTTP
CORS_ORIGINS = _split_csv(os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"))
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
REDIS_URL = os.getenv("REDIS_URL", "memory://")

# Logging
LOG_FILE = os.getenv("LOG_FILE", "resort_logs.txt")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
