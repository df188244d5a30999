"""
Availability checker - room double-booking detection

Works on stay windows (room + check-in + check-out dates). Two windows on the
same room conflict only when they strictly overlap, so a stay may start on the
day the previous one checks out.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from utils.pricing_engine import parse_to_date


# Statuses that never hold a room
RELEASED_STATUSES = ("Checked-out", "Cancelled")


@dataclass(frozen=True)
class StayWindow:
    room_id: Any
    check_in: date
    check_out: date

    @classmethod
    def of(cls, room_id, check_in, check_out) -> "StayWindow":
        return cls(room_id=room_id, check_in=parse_to_date(check_in), check_out=parse_to_date(check_out))


@dataclass
class ConflictCheck:
    has_conflict: bool
    blocking_booking: Any = None
    candidate: Optional[StayWindow] = None
    blocking_window: Optional[StayWindow] = None

    def __bool__(self) -> bool:
        return self.has_conflict


NO_CONFLICT = ConflictCheck(has_conflict=False)


def ranges_overlap(a_check_in: date, a_check_out: date, b_check_in: date, b_check_out: date) -> bool:
    # Strict inequalities: checkout == next check-in is a turnover, not an overlap
    return a_check_in < b_check_out and a_check_out > b_check_in


def _status_value(booking: Any) -> str:
    status = getattr(booking, "status", None)
    return getattr(status, "value", status)


def holds_rooms(booking: Any) -> bool:
    return _status_value(booking) not in RELEASED_STATUSES


def stay_windows(booking: Any) -> Iterator[StayWindow]:
    """
    Rooms held by a booking. Models expose stay_windows() themselves; plain
    records fall back to room_id/check_in/check_out or their rooms list.
    """
    if hasattr(booking, "stay_windows"):
        yield from booking.stay_windows()
        return

    room_id = getattr(booking, "room_id", None)
    if room_id is not None:
        yield StayWindow.of(room_id, booking.check_in, booking.check_out)
        return

    for stay in getattr(booking, "rooms", None) or ():
        yield StayWindow.of(stay.room_id, stay.check_in_date, stay.check_out_date)


def _first_overlap(candidate: StayWindow, booking: Any) -> Optional[StayWindow]:
    for window in stay_windows(booking):
        if window.room_id != candidate.room_id:
            continue
        if ranges_overlap(candidate.check_in, candidate.check_out, window.check_in, window.check_out):
            return window
    return None


def check_single_room_conflict(candidate: StayWindow, bookings: Iterable[Any]) -> ConflictCheck:
    """First active booking (in input order) that holds the candidate's room on overlapping dates"""
    for booking in bookings:
        if not holds_rooms(booking):
            continue
        window = _first_overlap(candidate, booking)
        if window is not None:
            return ConflictCheck(
                has_conflict=True,
                blocking_booking=booking,
                candidate=candidate,
                blocking_window=window,
            )
    return NO_CONFLICT


def check_multi_room_conflict(candidates: Sequence[StayWindow], bookings: Iterable[Any]) -> ConflictCheck:
    """
    Checks each candidate, in order, against the same pool of bookings.
    Candidates are not checked against each other here; see find_sibling_overlap.
    """
    pool = list(bookings)
    for candidate in candidates:
        result = check_single_room_conflict(candidate, pool)
        if result:
            return result
    return NO_CONFLICT


def find_sibling_overlap(candidates: Sequence[StayWindow]) -> Optional[Tuple[StayWindow, StayWindow]]:
    """First pair of candidates in one request that claim the same room on overlapping dates"""
    for index, first in enumerate(candidates):
        for second in candidates[index + 1:]:
            if first.room_id != second.room_id:
                continue
            if ranges_overlap(first.check_in, first.check_out, second.check_in, second.check_out):
                return first, second
    return None


def conflict_message(result: ConflictCheck) -> str:
    if not result:
        return "Room is available for the selected dates"
    booking = result.blocking_booking
    window = result.blocking_window
    guest = getattr(booking, "guest_name", None) or "another guest"
    booking_no = getattr(booking, "booking_no", None)
    reference = f" (booking {booking_no})" if booking_no else ""
    return (
        f"Room is already booked by {guest}{reference}. "
        f"From: {window.check_in.isoformat()} To: {window.check_out.isoformat()}"
    )


def available_room_ids(room_ids: Iterable[Any], check_in, check_out, bookings: Iterable[Any]) -> List[Any]:
    """Rooms from room_ids free for the whole [check_in, check_out) range"""
    pool = [booking for booking in bookings if holds_rooms(booking)]
    free = []
    for room_id in room_ids:
        candidate = StayWindow.of(room_id, check_in, check_out)
        if not check_single_room_conflict(candidate, pool):
            free.append(room_id)
    return free
