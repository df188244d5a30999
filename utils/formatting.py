"""
Display helpers: currency, dates, Bangladeshi phone numbers
"""
import re

from config import CURRENCY
from utils.pricing_engine import parse_to_date, round_money


_PHONE_RE = re.compile(r"^(\+?880|0)?1[3-9]\d{8}$")


def format_currency(amount, currency: str = CURRENCY) -> str:
    return f"{currency} {round_money(amount):.2f}"


def format_booking_date(value) -> str:
    """01 Feb 2026"""
    return parse_to_date(value).strftime("%d %b %Y")


def format_date_display(value) -> str:
    """Feb 1, 2026"""
    d = parse_to_date(value)
    return f"{d:%b} {d.day}, {d.year}"


def validate_phone_number(phone: str) -> bool:
    return bool(_PHONE_RE.match(re.sub(r"\s+", "", phone or "")))


def format_phone_number(phone: str) -> str:
    """Normalizes to +880XXXXXXXXXX when the input is recognizable"""
    digits = re.sub(r"\D", "", phone or "")
    if digits.startswith("880"):
        return f"+{digits}"
    if digits.startswith("0"):
        return f"+880{digits[1:]}"
    if len(digits) == 10:
        return f"+880{digits}"
    return phone
