"""
Dashboard statistics: money totals over a date range, expenses and occupancy
"""
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import connection
from models.booking import Booking, BookingStatusEnum
from models.expense import Expense
from schemas.statistics import MonthlyBookings, StatisticsSummary
from services.booking_service import active_bookings
from utils.availability import stay_windows
from utils.dependencies import OperatorContext, get_operator
from utils.logging_utils import log_event
from utils.pricing_engine import round_money
from utils.timezone import get_operational_date


router = APIRouter(prefix="/statistics", tags=["Statistics"])


def _month_bounds(day: date):
    first = day.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return first, next_first - timedelta(days=1)


def _total(rows, field: str):
    return round_money(sum((getattr(row, field) or 0 for row in rows), 0))


@router.get("/summary", response_model=StatisticsSummary)
def get_summary(
    date_from: Optional[date] = Query(None, description="Defaults to the first day of the current month"),
    date_to: Optional[date] = Query(None, description="Defaults to the last day of the current month"),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    """
    Totals over bookings whose check-in falls in [date_from, date_to] and
    expenses dated in the same range. bookings_per_month counts check-ins of
    the calendar year of date_to, leaving cancelled bookings out.
    """
    today = get_operational_date()
    month_start, month_end = _month_bounds(today)
    date_from = date_from or month_start
    date_to = date_to or month_end
    if date_to < date_from:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid date range")

    bookings = (
        db.query(Booking)
        .filter(Booking.check_in >= date_from, Booking.check_in <= date_to)
        .all()
    )
    expenses = (
        db.query(Expense)
        .filter(Expense.expense_date >= date_from, Expense.expense_date <= date_to)
        .all()
    )

    total_revenue = _total(bookings, "revenue")
    total_expenses = _total(expenses, "amount")

    occupied_rooms = {
        window.room_id
        for booking in active_bookings(db)
        for window in stay_windows(booking)
        if window.check_in <= today < window.check_out
    }

    year_start = date(date_to.year, 1, 1)
    year_end = date(date_to.year, 12, 31)
    per_month = [0] * 12
    monthly = db.query(Booking.check_in).filter(
        Booking.check_in >= year_start,
        Booking.check_in <= year_end,
        Booking.status != BookingStatusEnum.CANCELLED.value,
    )
    for (check_in,) in monthly:
        per_month[check_in.month - 1] += 1

    log_event(
        "statistics", operator.label, "Summary",
        f"{date_from.isoformat()}..{date_to.isoformat()} bookings={len(bookings)} expenses={len(expenses)}"
    )
    return StatisticsSummary(
        date_from=date_from,
        date_to=date_to,
        total_bookings=len(bookings),
        total_advance=_total(bookings, "advance"),
        total_vat=_total(bookings, "vat_amount"),
        total_checkout_payable=_total(bookings, "checkout_payable"),
        total_refunds=_total(bookings, "refund_amount"),
        total_revenue=total_revenue,
        total_booked_amount=_total(bookings, "price"),
        total_pending=_total(bookings, "pending_amount"),
        total_expenses=total_expenses,
        profit_loss=round_money(total_revenue - total_expenses),
        active_rooms_today=len(occupied_rooms),
        bookings_per_month=[
            MonthlyBookings(month=index + 1, bookings=count) for index, count in enumerate(per_month)
        ],
    )
