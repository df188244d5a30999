"""
Business services for the booking lifecycle
"""

from .booking_service import (
    BookingService,
    BookingError,
    BookingValidationError,
    BookingNotFoundError,
    BookingConflictError,
    InvalidTransitionError,
    BookingStorageError,
)

__all__ = [
    "BookingService",
    "BookingError",
    "BookingValidationError",
    "BookingNotFoundError",
    "BookingConflictError",
    "InvalidTransitionError",
    "BookingStorageError",
]
