from typing import List
from datetime import date
from decimal import Decimal
from pydantic import BaseModel


class MonthlyBookings(BaseModel):
    month: int  # 1-12
    bookings: int


class StatisticsSummary(BaseModel):
    date_from: date
    date_to: date
    total_bookings: int
    total_advance: Decimal
    total_vat: Decimal
    total_checkout_payable: Decimal
    total_refunds: Decimal
    total_revenue: Decimal
    total_booked_amount: Decimal
    total_pending: Decimal
    total_expenses: Decimal
    profit_loss: Decimal
    active_rooms_today: int
    bookings_per_month: List[MonthlyBookings]  # cancelled bookings excluded
