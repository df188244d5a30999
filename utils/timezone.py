from datetime import date, datetime
import pytz

from config import RESORT_TIMEZONE

RESORT_TZ = pytz.timezone(RESORT_TIMEZONE)


def get_resort_now() -> datetime:
    """Returns current time in the resort timezone"""
    return datetime.now(RESORT_TZ)


def get_operational_date() -> date:
    """Today's calendar date at the resort"""
    return get_resort_now().date()
