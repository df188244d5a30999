"""
Booking models
A booking holds either one room directly (room_id) or a list of room stays
(booking_rooms) with their own dates and nightly price, never both.
"""

from sqlalchemy import (
    Column, Integer, String, ForeignKey, Date, DateTime, Boolean, Numeric, Text,
    Index, CheckConstraint
)
from sqlalchemy.orm import relationship
from database.connection import Base
from datetime import datetime
from enum import Enum

from config import DEFAULT_CHECK_IN_TIME, DEFAULT_CHECK_OUT_TIME
from utils.availability import StayWindow


# ========================================================================
# ENUMS
# ========================================================================

class BookingStatusEnum(str, Enum):
    CONFIRMED = "Confirmed"
    PAID = "Paid"
    CHECKED_OUT = "Checked-out"
    CANCELLED = "Cancelled"


# Statuses from which checkout and cancellation are allowed
OPEN_BOOKING_STATES = (BookingStatusEnum.CONFIRMED.value, BookingStatusEnum.PAID.value)


class BookingKind(str, Enum):
    SINGLE = "single"
    MULTI = "multi"


# ----------- BOOKING -----------
class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index('idx_bookings_guest_phone', 'guest_phone'),
        Index('idx_bookings_status', 'status'),
        Index('idx_bookings_dates', 'check_in', 'check_out'),
        CheckConstraint('check_in < check_out', name='ck_bookings_dates'),
    )

    id = Column(Integer, primary_key=True, index=True)
    booking_no = Column(String(50), nullable=False, unique=True, index=True)

    # Guest
    guest_name = Column(String(150), nullable=False)
    guest_phone = Column(String(20), nullable=False)
    guest_email = Column(String(255), nullable=True)
    num_adults = Column(Integer, default=1)

    # Rooms: room_id for single-room bookings, NULL + booking_rooms for multi-room
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True)
    total_rooms = Column(Integer, nullable=False, default=1)

    # Dates (times are display only)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    check_in_time = Column(String(10), default=DEFAULT_CHECK_IN_TIME)
    check_out_time = Column(String(10), default=DEFAULT_CHECK_OUT_TIME)

    # Money
    price = Column(Numeric(12, 2), nullable=False, default=0)
    advance = Column(Numeric(12, 2), nullable=False, default=0)
    vat_applicable = Column(Boolean, nullable=False, default=False)
    vat_amount = Column(Numeric(12, 2), nullable=False, default=0)
    checkout_payable = Column(Numeric(12, 2), nullable=False, default=0)
    refund_amount = Column(Numeric(12, 2), nullable=False, default=0)
    pending_amount = Column(Numeric(12, 2), nullable=False, default=0)
    revenue = Column(Numeric(12, 2), nullable=False, default=0)
    extra_income = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default=BookingStatusEnum.CONFIRMED.value)
    remarks = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    room = relationship("Room", back_populates="bookings")
    rooms = relationship(
        "BookingRoom",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BookingRoom.id",
    )

    @property
    def kind(self) -> BookingKind:
        return BookingKind.SINGLE if self.room_id is not None else BookingKind.MULTI

    @property
    def room_name(self):
        if self.kind is BookingKind.SINGLE:
            return self.room.name if self.room else None
        return ", ".join(stay.room.name for stay in self.rooms if stay.room) or None

    def stay_windows(self):
        """One window per room this booking occupies"""
        if self.kind is BookingKind.SINGLE:
            yield StayWindow(self.room_id, self.check_in, self.check_out)
            return
        for stay in self.rooms:
            yield StayWindow(stay.room_id, stay.check_in_date, stay.check_out_date)

    def __repr__(self):
        return f"<Booking(id={self.id}, booking_no='{self.booking_no}', status='{self.status}')>"


# ----------- BOOKING ROOM (room stay of a multi-room booking) -----------
class BookingRoom(Base):
    __tablename__ = "booking_rooms"
    __table_args__ = (
        Index('idx_booking_rooms_booking', 'booking_id'),
        Index('idx_booking_rooms_room', 'room_id'),
        CheckConstraint('check_in_date < check_out_date', name='ck_booking_rooms_dates'),
    )

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)

    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)

    # Pricing
    number_of_nights = Column(Integer, nullable=False, default=1)
    price_per_night = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    vat = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    booking = relationship("Booking", back_populates="rooms")
    room = relationship("Room", back_populates="room_stays")

    @property
    def room_name(self):
        return self.room.name if self.room else None

    def __repr__(self):
        return f"<BookingRoom(booking_id={self.booking_id}, room_id={self.room_id})>"
