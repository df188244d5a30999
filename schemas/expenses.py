"""
Pydantic schemas for resort expenses
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator, ConfigDict
from enum import Enum


# ========== ENUMS ==========

class ExpenseCategoryEnum(str, Enum):
    EMPLOYEES = "Employees"
    UTILITIES = "Utilities"
    MAINTENANCE = "Maintenance"
    OTHER = "Other"


class PaymentMethodEnum(str, Enum):
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"
    CARD = "Card"


# ========== SCHEMAS ==========

# NOT NULL columns of the expenses table
REQUIRED_EXPENSE_FIELDS = ("expense_date", "category", "amount")


class ExpenseBase(BaseModel):
    expense_date: date
    category: ExpenseCategoryEnum
    description: Optional[str] = Field(None, max_length=255)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_method: Optional[PaymentMethodEnum] = None


class ExpenseCreate(ExpenseBase):
    """created_by is taken from the operator, never from the body"""
    pass


class ExpenseUpdate(BaseModel):
    expense_date: Optional[date] = None
    category: Optional[ExpenseCategoryEnum] = None
    description: Optional[str] = Field(None, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    payment_method: Optional[PaymentMethodEnum] = None

    @model_validator(mode="before")
    def validate_data(cls, data):
        if isinstance(data, dict) and data:
            nulls = sorted(field for field in REQUIRED_EXPENSE_FIELDS if field in data and data[field] is None)
            if nulls:
                raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
            return data
        raise ValueError("At least one field is required for the update")


class ExpenseRead(BaseModel):
    id: int
    expense_date: date
    category: str
    description: Optional[str] = None
    amount: Decimal
    payment_method: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
