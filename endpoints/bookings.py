from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from database import connection
from models.booking import Booking, BookingRoom, BookingStatusEnum
from models.room import Room
from schemas.bookings import (
    BookingCreate,
    BookingRead,
    BookingUpdate,
    CancelRequest,
    CancellationResponse,
    CheckoutRequest,
    RefundPolicyRead,
    RefundQuoteRead,
    RefundTierRead,
)
from services.booking_service import BookingError, BookingService
from utils.dependencies import OperatorContext, get_operator, require_admin
from utils.logging_utils import log_event
from utils.pricing_engine import REFUND_POLICY_TIERS, refund_policy_text


router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _http_error(error: BookingError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)


@router.get("/refund-policy", response_model=RefundPolicyRead)
def get_refund_policy():
    return RefundPolicyRead(
        tiers=[RefundTierRead.model_validate(tier) for tier in REFUND_POLICY_TIERS],
        text=refund_policy_text(),
    )


@router.get("", response_model=List[BookingRead])
def list_bookings(
    status_filter: Optional[BookingStatusEnum] = Query(None, alias="status"),
    search: Optional[str] = Query(None, min_length=1, max_length=100),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    if date_from and date_to and date_to < date_from:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid date range")

    query = db.query(Booking).options(selectinload(Booking.rooms))
    if status_filter:
        query = query.filter(Booking.status == status_filter.value)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Booking.guest_name.ilike(term),
                Booking.guest_phone.ilike(term),
                Booking.booking_no.ilike(term),
                Booking.room.has(Room.name.ilike(term)),
                Booking.rooms.any(BookingRoom.room.has(Room.name.ilike(term))),
            )
        )
    if date_from:
        query = query.filter(Booking.check_in >= date_from)
    if date_to:
        query = query.filter(Booking.check_in <= date_to)

    bookings = query.order_by(Booking.check_in.desc(), Booking.id.desc()).all()
    log_event("bookings", operator.label, "List bookings", f"total={len(bookings)}")
    return bookings


@router.get("/by-number/{booking_no}", response_model=BookingRead)
def get_booking_by_number(
    booking_no: str = Path(..., min_length=1, max_length=50),
    db: Session = Depends(connection.get_db),
):
    try:
        return BookingService.get_by_number(db, booking_no)
    except BookingError as e:
        raise _http_error(e)


@router.get("/{booking_id}", response_model=BookingRead)
def get_booking(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
):
    try:
        return BookingService.get(db, booking_id)
    except BookingError as e:
        raise _http_error(e)


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking: BookingCreate,
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    try:
        return BookingService.create(db, booking, operator)
    except BookingError as e:
        raise _http_error(e)


@router.patch("/{booking_id}", response_model=BookingRead)
def update_booking(
    data: BookingUpdate,
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    try:
        return BookingService.update(db, booking_id, data, operator)
    except BookingError as e:
        raise _http_error(e)


@router.post("/{booking_id}/checkout", response_model=BookingRead)
def checkout_booking(
    data: Optional[CheckoutRequest] = None,
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    data = data or CheckoutRequest()
    try:
        return BookingService.checkout(
            db, booking_id, operator,
            extra_income=data.extra_income,
            discount=data.discount,
        )
    except BookingError as e:
        raise _http_error(e)


@router.get("/{booking_id}/refund-quote", response_model=RefundQuoteRead)
def get_refund_quote(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
):
    try:
        quote = BookingService.quote_refund(db, booking_id)
    except BookingError as e:
        raise _http_error(e)
    return RefundQuoteRead.model_validate(quote)


@router.post("/{booking_id}/cancel", response_model=CancellationResponse)
def cancel_booking(
    data: Optional[CancelRequest] = None,
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    data = data or CancelRequest()
    try:
        booking, quote = BookingService.cancel(
            db, booking_id, operator,
            custom_refund_amount=data.custom_refund_amount,
        )
    except BookingError as e:
        raise _http_error(e)
    return CancellationResponse(
        booking=BookingRead.model_validate(booking),
        refund=RefundQuoteRead.model_validate(quote),
    )


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(require_admin),
):
    try:
        BookingService.delete(db, booking_id, operator)
    except BookingError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
