"""
Pricing Engine - VAT, totals, checkout balance and cancellation refunds
SINGLE SOURCE OF TRUTH for every money figure stored on a booking

All amounts are Decimal and rounded half-up to cents. Booking-level VAT is
additionally settled to VAT_SETTLEMENT_QUANTUM (whole currency units by default).
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from config import VAT_RATE, VAT_SETTLEMENT_QUANTUM
from utils.timezone import get_operational_date


CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def _safe_decimal(value, fallback: Decimal = Decimal("0")) -> Decimal:
    """Converts to Decimal going through str so floats keep their printed value"""
    if value is None:
        return fallback
    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return fallback


def round_money(value) -> Decimal:
    return _safe_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_to_date(value) -> date:
    """Converts string/datetime/date to date"""
    if value is None:
        raise ValueError("Date value is None")

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
        except ValueError:
            try:
                return datetime.strptime(value, '%Y-%m-%d').date()
            except ValueError:
                raise ValueError(f"Invalid date format: {value}")

    raise TypeError(f"Unsupported date type: {type(value)}")


def days_between(start, end) -> int:
    """Days from start to end, a partial day counting as a whole one"""
    if isinstance(start, datetime) and isinstance(end, datetime):
        return math.ceil((end - start) / timedelta(days=1))
    return (parse_to_date(end) - parse_to_date(start)).days


def _field(source: Any, name: str, default=None):
    if isinstance(source, dict):
        return source.get(name, default)
    return getattr(source, name, default)


# =====================================================================
# VAT + TOTALS
# =====================================================================

def calculate_vat(price, vat_applicable: bool) -> Decimal:
    if not vat_applicable:
        return ZERO
    return round_money(_safe_decimal(price) * VAT_RATE)


def settle_vat(amount) -> Decimal:
    """Booking-level VAT as quoted to the guest"""
    return _safe_decimal(amount).quantize(VAT_SETTLEMENT_QUANTUM, rounding=ROUND_HALF_UP)


def calculate_total_price(price, vat_amount) -> Decimal:
    return round_money(_safe_decimal(price) + _safe_decimal(vat_amount))


def calculate_checkout_payable(total_price, advance, extra_income=0, discount=0) -> Decimal:
    """Balance due at checkout. Negative when the guest overpaid."""
    return round_money(
        _safe_decimal(total_price)
        - _safe_decimal(advance)
        + _safe_decimal(extra_income)
        - _safe_decimal(discount)
    )


def calculate_total_revenue(total_price, extra_income=0, discount=0) -> Decimal:
    return round_money(_safe_decimal(total_price) + _safe_decimal(extra_income) - _safe_decimal(discount))


def calculate_nights(check_in, check_out) -> int:
    return max(days_between(check_in, check_out), 1)


@dataclass
class RoomLine:
    room_id: Any
    check_in_date: date
    check_out_date: date
    nights: int
    price_per_night: Decimal
    line_total: Decimal
    vat: Decimal


@dataclass
class MultiRoomTotal:
    total_price: Decimal
    vat_amount: Decimal
    base_price: Decimal
    lines: List[RoomLine] = field(default_factory=list)


def calculate_multi_room_total(stays: Iterable[Any], vat_applicable: bool, vat_adjustment=0) -> MultiRoomTotal:
    """
    Aggregates the room stays of a multi-room booking.

    Each stay is a dict or object with price_per_night, check_in_date and
    check_out_date (room_id is carried into the breakdown when present).
    VAT is computed per line at cent precision, summed, settled, and the
    operator adjustment is added on top.
    """
    base_total = Decimal("0")
    vat_total = Decimal("0")
    lines: List[RoomLine] = []

    for stay in stays:
        price_per_night = _safe_decimal(_field(stay, "price_per_night"))
        check_in = parse_to_date(_field(stay, "check_in_date"))
        check_out = parse_to_date(_field(stay, "check_out_date"))
        nights = days_between(check_in, check_out)

        line_total = price_per_night * nights
        base_total += line_total

        line_vat = calculate_vat(line_total, vat_applicable)
        vat_total += line_vat

        lines.append(RoomLine(
            room_id=_field(stay, "room_id"),
            check_in_date=check_in,
            check_out_date=check_out,
            nights=nights,
            price_per_night=round_money(price_per_night),
            line_total=round_money(line_total),
            vat=line_vat,
        ))

    vat_amount = settle_vat(round_money(vat_total)) + _safe_decimal(vat_adjustment)
    return MultiRoomTotal(
        total_price=round_money(base_total + vat_amount),
        vat_amount=round_money(vat_amount),
        base_price=round_money(base_total),
        lines=lines,
    )


# =====================================================================
# REFUNDS
# =====================================================================

@dataclass(frozen=True)
class RefundTier:
    name: str
    max_days: Optional[int]  # inclusive upper bound on days until check-in; None = open
    percentage: Decimal
    description: str


REFUND_POLICY_TIERS = (
    RefundTier("No refund", 0, Decimal("0"), "100% charge - Cancelled on or after the check-in date"),
    RefundTier("72-0 Hours", 3, Decimal("0"), "100% charge - Cancelled within 72 hours to check-in date"),
    RefundTier("7-3 Days", 6, Decimal("50"), "50% refund - Cancelled between 7 days to 72 hours"),
    RefundTier("7+ Days", None, Decimal("85"), "85% refund - Cancelled 7 days before check-in"),
)

CUSTOM_REFUND_LABEL = "Custom"


@dataclass
class RefundQuote:
    refund_amount: Decimal
    policy_description: str
    refund_percentage: Optional[Decimal] = None
    days_until_check_in: Optional[int] = None

    @property
    def is_custom(self) -> bool:
        return self.refund_percentage is None


def refund_tier_for(days_until_check_in: int) -> RefundTier:
    for tier in REFUND_POLICY_TIERS:
        if tier.max_days is None or days_until_check_in <= tier.max_days:
            return tier
    return REFUND_POLICY_TIERS[-1]


def calculate_refund(
    price,
    check_in,
    advance_paid,
    custom_refund_amount=None,
    today: Optional[date] = None,
) -> RefundQuote:
    """
    Refund owed on cancellation.

    A custom amount negotiated with the guest is returned as given. Otherwise
    the tier is chosen from the whole days between today (resort calendar)
    and the check-in date and applied to the advance, not to the price.
    """
    if custom_refund_amount is not None:
        return RefundQuote(
            refund_amount=_safe_decimal(custom_refund_amount),
            policy_description=CUSTOM_REFUND_LABEL,
        )

    reference_day = today or get_operational_date()
    days_until = (parse_to_date(check_in) - parse_to_date(reference_day)).days
    tier = refund_tier_for(days_until)

    return RefundQuote(
        refund_amount=round_money(_safe_decimal(advance_paid) * tier.percentage / Decimal("100")),
        policy_description=tier.description,
        refund_percentage=tier.percentage,
        days_until_check_in=days_until,
    )


def refund_policy_text() -> str:
    return """
CANCELLATION & REFUND POLICY
============================

1. PREMIUM CANCELLATION (7+ Days Before Check-In)
   - Refund: 85% of advance paid
   - Reason: Allows property to rebook the room

2. STANDARD CANCELLATION (7 Days to 72 Hours Before Check-In)
   - Refund: 50% of advance paid
   - Reason: Limited time to rebook; partial recovery

3. LATE CANCELLATION (Within 72 Hours to Check-In)
   - Refund: 0% (100% charge applies)
   - Reason: No time to rebook; operational costs incurred

SPECIAL CASES:
- No-show: Full charge applies
- Emergency cancellation: Contact management for review
- Refunds processed within 5-7 business days
"""


# =====================================================================
# LIFECYCLE TRANSITIONS
# =====================================================================

def checkout_adjustments(price, checkout_payable, revenue, extra_income=0, discount=0) -> Dict[str, Decimal]:
    """New money fields when the guest checks out (status is set by the caller)"""
    settled = round_money(_safe_decimal(checkout_payable) + _safe_decimal(extra_income) - _safe_decimal(discount))
    return {
        "advance": round_money(price),
        "checkout_payable": ZERO,
        "pending_amount": ZERO,
        "revenue": round_money(_safe_decimal(revenue) + settled),
        "extra_income": round_money(extra_income),
        "discount": round_money(discount),
    }


def cancellation_adjustments(advance, refund_amount) -> Dict[str, Decimal]:
    """New money fields when a booking is cancelled (status is set by the caller)"""
    kept = round_money(_safe_decimal(advance) - _safe_decimal(refund_amount))
    return {
        "refund_amount": round_money(refund_amount),
        "checkout_payable": ZERO,
        "pending_amount": ZERO,
        "vat_amount": ZERO,
        "revenue": kept,
        "advance": kept,
    }
