"""
Tests for the availability checker
Strict overlap on the same room, adjacency allowed, released bookings ignored
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from models.booking import Booking, BookingKind, BookingRoom
from utils.availability import (
    StayWindow,
    available_room_ids,
    check_multi_room_conflict,
    check_single_room_conflict,
    conflict_message,
    find_sibling_overlap,
    ranges_overlap,
    stay_windows,
)


FEB = date(2026, 2, 1)


def day(n):
    """Feb 1 2026 + n days"""
    return FEB + timedelta(days=n)


def single(room_id, check_in, check_out, status="Confirmed", booking_no="B-1", guest_name="Rahim"):
    return SimpleNamespace(
        room_id=room_id, check_in=check_in, check_out=check_out,
        status=status, booking_no=booking_no, guest_name=guest_name,
    )


def multi(stays, status="Confirmed", booking_no="M-1", guest_name="Karim"):
    return SimpleNamespace(
        room_id=None,
        rooms=[SimpleNamespace(room_id=r, check_in_date=i, check_out_date=o) for r, i, o in stays],
        status=status, booking_no=booking_no, guest_name=guest_name,
    )


class TestRangesOverlap:

    def test_overlap_properties_over_small_calendar(self):
        for a_in in range(0, 5):
            for a_len in range(1, 4):
                for b_in in range(0, 5):
                    for b_len in range(1, 4):
                        a_out, b_out = a_in + a_len, b_in + b_len
                        expected = a_in < b_out and a_out > b_in
                        assert ranges_overlap(day(a_in), day(a_out), day(b_in), day(b_out)) is expected
                        if a_out <= b_in or b_out <= a_in:
                            assert not expected

    def test_back_to_back_is_not_an_overlap(self):
        assert not ranges_overlap(day(0), day(1), day(1), day(2))
        assert not ranges_overlap(day(1), day(2), day(0), day(1))


class TestSingleRoomConflict:

    def test_overlapping_stay_is_blocked(self):
        existing = single("A", day(0), day(2), booking_no="B-100")
        result = check_single_room_conflict(StayWindow("A", day(1), day(3)), [existing])

        assert result.has_conflict
        assert result.blocking_booking is existing
        assert result.blocking_window == StayWindow("A", day(0), day(2))

    def test_adjacent_stay_is_allowed(self):
        existing = single("A", day(0), day(1))
        result = check_single_room_conflict(StayWindow("A", day(1), day(2)), [existing])

        assert not result
        assert result.blocking_booking is None

    def test_other_room_never_blocks(self):
        existing = single("B", day(0), day(5))
        assert not check_single_room_conflict(StayWindow("A", day(1), day(2)), [existing])

    @pytest.mark.parametrize("status", ["Cancelled", "Checked-out"])
    def test_released_bookings_never_block(self, status):
        existing = single("A", day(0), day(5), status=status)
        assert not check_single_room_conflict(StayWindow("A", day(1), day(2)), [existing])

    def test_paid_booking_blocks(self):
        existing = single("A", day(0), day(5), status="Paid")
        assert check_single_room_conflict(StayWindow("A", day(1), day(2)), [existing])

    def test_room_stay_of_multi_room_booking_blocks(self):
        existing = multi([("A", day(0), day(1)), ("B", day(2), day(4))])
        result = check_single_room_conflict(StayWindow("B", day(3), day(5)), [existing])

        assert result
        assert result.blocking_window == StayWindow("B", day(2), day(4))

    def test_multi_room_booking_only_blocks_its_own_dates_per_room(self):
        existing = multi([("A", day(0), day(1)), ("B", day(2), day(4))])
        # Room A is free from day 1 even though the booking runs until day 4
        assert not check_single_room_conflict(StayWindow("A", day(1), day(3)), [existing])

    def test_first_conflict_in_input_order_wins(self):
        first = single("A", day(0), day(3), booking_no="B-1")
        second = single("A", day(1), day(2), booking_no="B-2")

        assert check_single_room_conflict(StayWindow("A", day(1), day(2)), [first, second]).blocking_booking is first
        assert check_single_room_conflict(StayWindow("A", day(1), day(2)), [second, first]).blocking_booking is second

    def test_enum_status_is_understood(self):
        from models.booking import BookingStatusEnum
        existing = single("A", day(0), day(5), status=BookingStatusEnum.CANCELLED)
        assert not check_single_room_conflict(StayWindow("A", day(1), day(2)), [existing])


class TestMultiRoomConflict:

    def test_each_candidate_checked_against_the_pool(self):
        pool = [single("B", day(1), day(3), booking_no="B-7")]
        candidates = [StayWindow("A", day(0), day(1)), StayWindow("B", day(2), day(3))]

        result = check_multi_room_conflict(candidates, pool)

        assert result
        assert result.candidate == candidates[1]
        assert result.blocking_booking.booking_no == "B-7"

    def test_no_conflict_when_every_candidate_is_free(self):
        pool = [single("A", day(0), day(1)), multi([("B", day(5), day(6))])]
        candidates = [StayWindow("A", day(1), day(2)), StayWindow("B", day(2), day(5))]

        assert not check_multi_room_conflict(candidates, pool)

    def test_candidates_are_not_checked_against_each_other(self):
        candidates = [StayWindow("A", day(0), day(2)), StayWindow("A", day(1), day(3))]
        assert not check_multi_room_conflict(candidates, [])

    def test_pool_can_be_a_generator(self):
        pool = (b for b in [single("A", day(0), day(1)), single("B", day(0), day(2))])
        candidates = [StayWindow("A", day(1), day(2)), StayWindow("B", day(1), day(2))]

        assert check_multi_room_conflict(candidates, pool)

    def test_sibling_overlap_is_found(self):
        candidates = [
            StayWindow("A", day(0), day(2)),
            StayWindow("B", day(0), day(2)),
            StayWindow("A", day(1), day(3)),
        ]
        assert find_sibling_overlap(candidates) == (candidates[0], candidates[2])

    def test_adjacent_siblings_are_fine(self):
        candidates = [StayWindow("A", day(0), day(1)), StayWindow("A", day(1), day(2))]
        assert find_sibling_overlap(candidates) is None


class TestBookingModelWindows:
    """The ORM model exposes its rooms as stay windows"""

    def test_single_room_booking(self):
        booking = Booking(room_id=3, check_in=day(0), check_out=day(2), status="Confirmed")

        assert booking.kind is BookingKind.SINGLE
        assert list(booking.stay_windows()) == [StayWindow(3, day(0), day(2))]

    def test_multi_room_booking(self):
        booking = Booking(room_id=None, check_in=day(0), check_out=day(3), status="Confirmed")
        booking.rooms.append(BookingRoom(room_id=1, check_in_date=day(0), check_out_date=day(1),
                                         price_per_night=Decimal("100"), total_price=Decimal("100")))
        booking.rooms.append(BookingRoom(room_id=2, check_in_date=day(1), check_out_date=day(3),
                                         price_per_night=Decimal("100"), total_price=Decimal("200")))

        assert booking.kind is BookingKind.MULTI
        assert list(stay_windows(booking)) == [StayWindow(1, day(0), day(1)), StayWindow(2, day(1), day(3))]

    def test_model_bookings_feed_the_checker(self):
        booking = Booking(room_id=3, check_in=day(0), check_out=day(2), status="Confirmed",
                          booking_no="B-9", guest_name="Nadia")

        result = check_single_room_conflict(StayWindow(3, day(1), day(4)), [booking])
        assert result.blocking_booking is booking


class TestHelpers:

    def test_conflict_message_names_guest_booking_and_dates(self):
        existing = single("A", day(0), day(2), booking_no="B-100", guest_name="Rahim")
        result = check_single_room_conflict(StayWindow("A", day(1), day(3)), [existing])

        message = conflict_message(result)
        assert "Rahim" in message
        assert "B-100" in message
        assert "2026-02-01" in message and "2026-02-03" in message

    def test_conflict_message_when_free(self):
        assert conflict_message(check_single_room_conflict(StayWindow("A", day(0), day(1)), [])) == (
            "Room is available for the selected dates"
        )

    def test_available_room_ids(self):
        pool = [
            single("A", day(0), day(3)),
            single("B", day(0), day(3), status="Cancelled"),
            multi([("C", day(2), day(4))]),
        ]
        assert available_room_ids(["A", "B", "C", "D"], day(0), day(2), pool) == ["B", "C", "D"]

    def test_window_from_strings(self):
        assert StayWindow.of(1, "2026-02-01", "2026-02-03") == StayWindow(1, day(0), day(2))
