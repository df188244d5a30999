from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field, constr, condecimal, model_validator, ConfigDict

from config import DEFAULT_CHECK_IN_TIME, DEFAULT_CHECK_OUT_TIME
from models.booking import BookingKind
from utils.formatting import format_phone_number, validate_phone_number


TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

Money = condecimal(ge=0, max_digits=12, decimal_places=2)


class BookingRoomCreate(BaseModel):
    room_id: int = Field(..., gt=0)
    check_in_date: date
    check_out_date: date
    price_per_night: condecimal(gt=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self


class BookingRoomRead(BaseModel):
    id: int
    room_id: int
    room_name: Optional[str] = None
    check_in_date: date
    check_out_date: date
    number_of_nights: int
    price_per_night: Decimal
    total_price: Decimal
    vat: Decimal

    model_config = ConfigDict(from_attributes=True)


class BookingCreate(BaseModel):
    """
    Single-room bookings send room_id + price; multi-room bookings send rooms.
    For multi-room bookings the overall dates are the span of the stays.
    """
    booking_no: constr(strip_whitespace=True, min_length=1, max_length=50)
    guest_name: constr(strip_whitespace=True, min_length=1, max_length=150)
    guest_phone: constr(strip_whitespace=True, min_length=1, max_length=20)
    guest_email: Optional[EmailStr] = None
    num_adults: int = Field(1, ge=1)

    check_in: Optional[date] = None
    check_out: Optional[date] = None
    check_in_time: str = Field(DEFAULT_CHECK_IN_TIME, pattern=TIME_PATTERN)
    check_out_time: str = Field(DEFAULT_CHECK_OUT_TIME, pattern=TIME_PATTERN)

    room_id: Optional[int] = Field(None, gt=0)
    price: Optional[Money] = None
    rooms: List[BookingRoomCreate] = Field(default_factory=list)

    advance: Money = Decimal("0")
    vat_applicable: bool = False
    vat_adjustment: condecimal(max_digits=12, decimal_places=2) = Decimal("0")
    remarks: Optional[str] = None

    @model_validator(mode="after")
    def validate_booking(self):
        if not validate_phone_number(self.guest_phone):
            raise ValueError("guest_phone is not a valid phone number")
        self.guest_phone = format_phone_number(self.guest_phone)

        if self.room_id is not None and self.rooms:
            raise ValueError("Send either room_id or rooms, not both")
        if self.room_id is None and not self.rooms:
            raise ValueError("A room is required (room_id or rooms)")

        if self.room_id is not None:
            if self.price is None:
                raise ValueError("price is required for a single-room booking")
            if self.check_in is None or self.check_out is None:
                raise ValueError("check_in and check_out are required")
        else:
            # Overall dates always span the room stays; refunds are tiered on check_in
            first_in = min(stay.check_in_date for stay in self.rooms)
            last_out = max(stay.check_out_date for stay in self.rooms)
            if self.check_in is not None and self.check_in != first_in:
                raise ValueError(f"check_in must be the earliest room check-in ({first_in.isoformat()})")
            if self.check_out is not None and self.check_out != last_out:
                raise ValueError(f"check_out must be the latest room check-out ({last_out.isoformat()})")
            self.check_in = first_in
            self.check_out = last_out

        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self

    @property
    def is_multi_room(self) -> bool:
        return self.room_id is None


class BookingUpdate(BaseModel):
    """Only display fields are editable; status changes go through checkout/cancel"""
    remarks: Optional[str] = None
    check_in_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    check_out_time: Optional[str] = Field(None, pattern=TIME_PATTERN)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    def validate_data(cls, data):
        if isinstance(data, dict) and data:
            return data
        raise ValueError("At least one field is required for the update")


class BookingRead(BaseModel):
    id: int
    booking_no: str
    kind: BookingKind
    guest_name: str
    guest_phone: str
    guest_email: Optional[str] = None
    num_adults: int
    room_id: Optional[int] = None
    room_name: Optional[str] = None
    total_rooms: int
    check_in: date
    check_out: date
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    price: Decimal
    advance: Decimal
    vat_applicable: bool
    vat_amount: Decimal
    checkout_payable: Decimal
    refund_amount: Decimal
    pending_amount: Decimal
    revenue: Decimal
    extra_income: Decimal
    discount: Decimal
    status: str
    remarks: Optional[str] = None
    rooms: List[BookingRoomRead] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CheckoutRequest(BaseModel):
    extra_income: Money = Decimal("0")
    discount: Money = Decimal("0")


class CancelRequest(BaseModel):
    custom_refund_amount: Optional[Money] = None


class RefundQuoteRead(BaseModel):
    refund_amount: Decimal
    policy_description: str
    refund_percentage: Optional[Decimal] = None
    days_until_check_in: Optional[int] = None
    is_custom: bool = False

    model_config = ConfigDict(from_attributes=True)


class CancellationResponse(BaseModel):
    booking: BookingRead
    refund: RefundQuoteRead


class RefundTierRead(BaseModel):
    name: str
    max_days: Optional[int] = None
    percentage: Decimal
    description: str

    model_config = ConfigDict(from_attributes=True)


class RefundPolicyRead(BaseModel):
    tiers: List[RefundTierRead]
    text: str
