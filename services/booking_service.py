"""
Booking lifecycle service
Contains the business logic for:
- Creating single-room and multi-room bookings without double-booking a room
- Checkout (settles the balance)
- Cancellation (applies the refund policy)
- Display-field edits and deletion

Money figures come from utils.pricing_engine and conflicts from
utils.availability; this module only reads/writes the store around them.
"""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models.booking import Booking, BookingRoom, BookingStatusEnum, OPEN_BOOKING_STATES
from models.room import Room
from schemas.bookings import BookingCreate, BookingUpdate
from utils.availability import (
    RELEASED_STATUSES,
    ConflictCheck,
    StayWindow,
    check_multi_room_conflict,
    check_single_room_conflict,
    conflict_message,
    find_sibling_overlap,
)
from utils.dependencies import OperatorContext
from utils.formatting import format_currency
from utils.logging_utils import log_event, log_error
from utils.pricing_engine import (
    RefundQuote,
    calculate_checkout_payable,
    calculate_multi_room_total,
    calculate_refund,
    calculate_total_price,
    calculate_vat,
    cancellation_adjustments,
    checkout_adjustments,
    round_money,
    settle_vat,
)


# ========================================================================
# ERRORS
# ========================================================================

class BookingError(Exception):
    """Base error of the booking lifecycle; status_code is the HTTP status to answer with"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BookingValidationError(BookingError):
    status_code = 400


class BookingNotFoundError(BookingError):
    status_code = 404


class BookingConflictError(BookingError):
    status_code = 409

    def __init__(self, message: str, check: Optional[ConflictCheck] = None):
        super().__init__(message)
        self.check = check


class InvalidTransitionError(BookingError):
    status_code = 409


class BookingStorageError(BookingError):
    status_code = 500


# ========================================================================
# STORE ACCESS
# ========================================================================

def active_bookings(db: Session) -> List[Booking]:
    """Bookings still holding rooms, with their room stays, in id order"""
    return (
        db.query(Booking)
        .options(selectinload(Booking.rooms))
        .filter(Booking.status.notin_(RELEASED_STATUSES))
        .order_by(Booking.id)
        .all()
    )


def _commit(db: Session, operator: OperatorContext, action: str, booking: Optional[Booking] = None) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_error("bookings", operator.label, f"Error: {action}", f"error={str(e)}")
        raise BookingStorageError(f"Could not {action.lower()}, please try again") from e
    if booking is not None:
        db.refresh(booking)


class BookingService:
    """Booking lifecycle operations"""

    @staticmethod
    def get(db: Session, booking_id: int) -> Booking:
        booking = (
            db.query(Booking)
            .options(selectinload(Booking.rooms))
            .filter(Booking.id == booking_id)
            .first()
        )
        if not booking:
            raise BookingNotFoundError("Booking not found")
        return booking

    @staticmethod
    def get_by_number(db: Session, booking_no: str) -> Booking:
        booking = db.query(Booking).filter(Booking.booking_no == booking_no).first()
        if not booking:
            raise BookingNotFoundError("Booking not found")
        return booking

    @staticmethod
    def _ensure_booking_no_free(db: Session, booking_no: str) -> None:
        if db.query(Booking.id).filter(Booking.booking_no == booking_no).first():
            raise BookingConflictError(f"Booking number {booking_no} already exists")

    @staticmethod
    def _ensure_rooms_exist(db: Session, room_ids: List[int]) -> None:
        wanted = set(room_ids)
        found = {room_id for (room_id,) in db.query(Room.id).filter(Room.id.in_(wanted)).all()}
        missing = sorted(wanted - found)
        if missing:
            raise BookingNotFoundError(f"Rooms not found: {missing}")

    @staticmethod
    def _reject_conflict(result: ConflictCheck, operator: OperatorContext, booking_no: str) -> None:
        if not result:
            return
        message = conflict_message(result)
        log_event(
            "bookings", operator.label, "Booking conflict",
            f"booking_no={booking_no} room_id={result.candidate.room_id} "
            f"blocked_by={getattr(result.blocking_booking, 'booking_no', None)}"
        )
        raise BookingConflictError(message, result)

    # --------------------------------------------------------------------
    # CREATE
    # --------------------------------------------------------------------

    @staticmethod
    def create(db: Session, data: BookingCreate, operator: OperatorContext) -> Booking:
        if data.is_multi_room:
            return BookingService.create_multi(db, data, operator)
        return BookingService.create_single(db, data, operator)

    @staticmethod
    def create_single(db: Session, data: BookingCreate, operator: OperatorContext) -> Booking:
        BookingService._ensure_booking_no_free(db, data.booking_no)
        BookingService._ensure_rooms_exist(db, [data.room_id])

        # Re-read the active set right before checking and inserting
        candidate = StayWindow(data.room_id, data.check_in, data.check_out)
        result = check_single_room_conflict(candidate, active_bookings(db))
        BookingService._reject_conflict(result, operator, data.booking_no)

        price = round_money(data.price)
        advance = round_money(data.advance)
        vat_amount = round_money(settle_vat(calculate_vat(price, data.vat_applicable)) + data.vat_adjustment)
        total = calculate_total_price(price, vat_amount)

        booking = Booking(
            booking_no=data.booking_no,
            guest_name=data.guest_name,
            guest_phone=data.guest_phone,
            guest_email=data.guest_email,
            num_adults=data.num_adults,
            room_id=data.room_id,
            total_rooms=1,
            check_in=data.check_in,
            check_out=data.check_out,
            check_in_time=data.check_in_time,
            check_out_time=data.check_out_time,
            price=price,
            advance=advance,
            vat_applicable=data.vat_applicable,
            vat_amount=vat_amount,
            checkout_payable=calculate_checkout_payable(total, advance),
            refund_amount=round_money(0),
            pending_amount=round_money(price - advance),
            revenue=advance,
            status=BookingStatusEnum.CONFIRMED.value,
            remarks=data.remarks,
        )
        return BookingService._insert(db, booking, operator)

    @staticmethod
    def create_multi(db: Session, data: BookingCreate, operator: OperatorContext) -> Booking:
        candidates = [StayWindow(stay.room_id, stay.check_in_date, stay.check_out_date) for stay in data.rooms]

        sibling = find_sibling_overlap(candidates)
        if sibling:
            first, second = sibling
            raise BookingValidationError(
                f"Room {first.room_id} is requested twice for overlapping dates "
                f"({first.check_in.isoformat()} - {first.check_out.isoformat()} and "
                f"{second.check_in.isoformat()} - {second.check_out.isoformat()})"
            )

        BookingService._ensure_booking_no_free(db, data.booking_no)
        BookingService._ensure_rooms_exist(db, [stay.room_id for stay in data.rooms])

        result = check_multi_room_conflict(candidates, active_bookings(db))
        BookingService._reject_conflict(result, operator, data.booking_no)

        totals = calculate_multi_room_total(data.rooms, data.vat_applicable, data.vat_adjustment)
        advance = round_money(data.advance)

        booking = Booking(
            booking_no=data.booking_no,
            guest_name=data.guest_name,
            guest_phone=data.guest_phone,
            guest_email=data.guest_email,
            num_adults=data.num_adults,
            room_id=None,
            total_rooms=len(data.rooms),
            check_in=data.check_in,
            check_out=data.check_out,
            check_in_time=data.check_in_time,
            check_out_time=data.check_out_time,
            price=totals.base_price,
            advance=advance,
            vat_applicable=data.vat_applicable,
            vat_amount=totals.vat_amount,
            checkout_payable=calculate_checkout_payable(totals.total_price, advance),
            refund_amount=round_money(0),
            pending_amount=round_money(totals.base_price - advance),
            revenue=advance,
            status=BookingStatusEnum.CONFIRMED.value,
            remarks=data.remarks,
        )
        for line in totals.lines:
            booking.rooms.append(BookingRoom(
                room_id=line.room_id,
                check_in_date=line.check_in_date,
                check_out_date=line.check_out_date,
                number_of_nights=line.nights,
                price_per_night=line.price_per_night,
                total_price=line.line_total,
                vat=line.vat,
            ))
        return BookingService._insert(db, booking, operator)

    @staticmethod
    def _insert(db: Session, booking: Booking, operator: OperatorContext) -> Booking:
        # Booking and its room stays go in one transaction
        db.add(booking)
        _commit(db, operator, "Create booking", booking)
        log_event(
            "bookings", operator.label, "Create booking",
            f"id={booking.id} booking_no={booking.booking_no} kind={booking.kind.value} "
            f"rooms={booking.total_rooms} price={format_currency(booking.price)} vat={format_currency(booking.vat_amount)}"
        )
        return booking

    # --------------------------------------------------------------------
    # TRANSITIONS
    # --------------------------------------------------------------------

    @staticmethod
    def _ensure_open(booking: Booking, action: str) -> None:
        if booking.status not in OPEN_BOOKING_STATES:
            raise InvalidTransitionError(f"Cannot {action} a booking in status {booking.status}")

    @staticmethod
    def checkout(
        db: Session,
        booking_id: int,
        operator: OperatorContext,
        extra_income=0,
        discount=0,
    ) -> Booking:
        booking = BookingService.get(db, booking_id)
        BookingService._ensure_open(booking, "check out")

        changes = checkout_adjustments(
            booking.price, booking.checkout_payable, booking.revenue, extra_income, discount
        )
        for field, value in changes.items():
            setattr(booking, field, value)
        booking.status = BookingStatusEnum.CHECKED_OUT.value

        _commit(db, operator, "Checkout booking", booking)
        log_event(
            "bookings", operator.label, "Checkout booking",
            f"id={booking.id} revenue={format_currency(booking.revenue)} extra_income={booking.extra_income} discount={booking.discount}"
        )
        return booking

    @staticmethod
    def quote_refund(db: Session, booking_id: int, today: Optional[date] = None) -> RefundQuote:
        booking = BookingService.get(db, booking_id)
        BookingService._ensure_open(booking, "quote a refund for")
        return calculate_refund(booking.price, booking.check_in, booking.advance, today=today)

    @staticmethod
    def cancel(
        db: Session,
        booking_id: int,
        operator: OperatorContext,
        custom_refund_amount=None,
        today: Optional[date] = None,
    ) -> Tuple[Booking, RefundQuote]:
        booking = BookingService.get(db, booking_id)
        BookingService._ensure_open(booking, "cancel")

        quote = calculate_refund(
            booking.price, booking.check_in, booking.advance,
            custom_refund_amount=custom_refund_amount, today=today,
        )
        for field, value in cancellation_adjustments(booking.advance, quote.refund_amount).items():
            setattr(booking, field, value)
        booking.status = BookingStatusEnum.CANCELLED.value

        _commit(db, operator, "Cancel booking", booking)
        log_event(
            "bookings", operator.label, "Cancel booking",
            f"id={booking.id} refund={format_currency(quote.refund_amount)} policy={quote.policy_description}"
        )
        return booking, quote

    # --------------------------------------------------------------------
    # EDIT / DELETE
    # --------------------------------------------------------------------

    @staticmethod
    def update(db: Session, booking_id: int, data: BookingUpdate, operator: OperatorContext) -> Booking:
        booking = BookingService.get(db, booking_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(booking, field, value)

        _commit(db, operator, "Update booking", booking)
        log_event("bookings", operator.label, "Update booking", f"id={booking.id} fields={sorted(changes)}")
        return booking

    @staticmethod
    def delete(db: Session, booking_id: int, operator: OperatorContext) -> None:
        booking = BookingService.get(db, booking_id)
        booking_no = booking.booking_no
        # Room stays go with it (delete-orphan cascade)
        db.delete(booking)
        _commit(db, operator, "Delete booking")
        log_event("bookings", operator.label, "Delete booking", f"id={booking_id} booking_no={booking_no}")
