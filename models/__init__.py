"""
Models package.
Importing it registers every table on Base.metadata.
"""

from .room import Room
from .booking import (
    Booking,
    BookingRoom,
    BookingStatusEnum,
    BookingKind,
    OPEN_BOOKING_STATES,
)
from .expense import Expense

__all__ = [
    "Room",
    "Booking", "BookingRoom", "BookingStatusEnum", "BookingKind", "OPEN_BOOKING_STATES",
    "Expense",
]
