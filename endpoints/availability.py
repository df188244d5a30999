"""
Room availability endpoints
"""
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import connection
from models.room import Room
from schemas.availability import AvailabilityCheckRead, RoomTimeline, TimelineBooking
from schemas.rooms import RoomRead
from services.booking_service import active_bookings
from utils.availability import (
    StayWindow,
    available_room_ids,
    check_single_room_conflict,
    conflict_message,
    stay_windows,
)
from utils.dependencies import OperatorContext, get_operator
from utils.logging_utils import log_event


router = APIRouter(prefix="/availability", tags=["Availability"])


def _validate_range(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="check_out must be after check_in"
        )


@router.get("/check", response_model=AvailabilityCheckRead)
def check_room(
    room_id: int = Query(..., gt=0),
    check_in: date = Query(..., description="Check-in date"),
    check_out: date = Query(..., description="Check-out date"),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    _validate_range(check_in, check_out)
    if not db.query(Room.id).filter(Room.id == room_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")

    result = check_single_room_conflict(StayWindow(room_id, check_in, check_out), active_bookings(db))
    log_event(
        "availability", operator.label, "Check room",
        f"room_id={room_id} {check_in.isoformat()}..{check_out.isoformat()} available={not result}"
    )
    return AvailabilityCheckRead(
        room_id=room_id,
        check_in=check_in,
        check_out=check_out,
        available=not result,
        blocking_booking_no=result.blocking_booking.booking_no if result else None,
        message=conflict_message(result),
    )


@router.get("/rooms", response_model=List[RoomRead])
def list_available_rooms(
    check_in: date = Query(..., description="Check-in date"),
    check_out: date = Query(..., description="Check-out date"),
    category: Optional[str] = Query(None, min_length=1, max_length=50),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    """Rooms free for the whole stay"""
    _validate_range(check_in, check_out)
    query = db.query(Room)
    if category:
        query = query.filter(Room.category == category)
    rooms = query.order_by(Room.name).all()

    free_ids = set(available_room_ids([room.id for room in rooms], check_in, check_out, active_bookings(db)))
    available = [room for room in rooms if room.id in free_ids]
    log_event(
        "availability", operator.label, "List available rooms",
        f"{check_in.isoformat()}..{check_out.isoformat()} available={len(available)}/{len(rooms)}"
    )
    return available


@router.get("/timeline", response_model=List[RoomTimeline])
def room_timeline(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(connection.get_db),
):
    """Active bookings per room ordered by check-in (occupancy view)"""
    if date_from and date_to:
        _validate_range(date_from, date_to)

    rooms = db.query(Room).order_by(Room.name).all()
    lanes: Dict[int, List[TimelineBooking]] = {room.id: [] for room in rooms}

    for booking in active_bookings(db):
        for window in stay_windows(booking):
            if date_from and window.check_out <= date_from:
                continue
            if date_to and window.check_in >= date_to:
                continue
            if window.room_id not in lanes:
                continue
            lanes[window.room_id].append(TimelineBooking(
                booking_id=booking.id,
                booking_no=booking.booking_no,
                guest_name=booking.guest_name,
                check_in=window.check_in,
                check_out=window.check_out,
                status=booking.status,
            ))

    return [
        RoomTimeline(
            room_id=room.id,
            room_name=room.name,
            bookings=sorted(lanes[room.id], key=lambda entry: (entry.check_in, entry.booking_id)),
        )
        for room in rooms
    ]
