from typing import Optional, List
from datetime import date
from pydantic import BaseModel, ConfigDict


class AvailabilityCheckRead(BaseModel):
    room_id: int
    check_in: date
    check_out: date
    available: bool
    blocking_booking_no: Optional[str] = None
    message: str


class TimelineBooking(BaseModel):
    booking_id: int
    booking_no: str
    guest_name: str
    check_in: date
    check_out: date
    status: str

    model_config = ConfigDict(from_attributes=True)


class RoomTimeline(BaseModel):
    room_id: int
    room_name: str
    bookings: List[TimelineBooking]
