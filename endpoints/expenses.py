"""
Expense endpoints (employees, utilities, maintenance, other)
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import connection
from models.expense import Expense
from schemas.expenses import ExpenseCategoryEnum, ExpenseCreate, ExpenseRead, ExpenseUpdate
from utils.dependencies import OperatorContext, get_operator, require_admin
from utils.logging_utils import log_event, log_error

router = APIRouter(prefix="/expenses", tags=["Expenses"])


def _get_expense(db: Session, expense_id: int) -> Expense:
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


def _commit(db: Session, operator: OperatorContext, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_error("expenses", operator.label, f"Error: {action}", f"error={str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not {action.lower()}"
        )


def _enum_values(data: dict) -> dict:
    return {key: getattr(value, "value", value) for key, value in data.items()}


@router.get("", response_model=List[ExpenseRead])
def list_expenses(
    category: Optional[ExpenseCategoryEnum] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, min_length=1, max_length=100),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    if date_from and date_to and date_to < date_from:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid date range")

    query = db.query(Expense)
    if category:
        query = query.filter(Expense.category == category.value)
    if date_from:
        query = query.filter(Expense.expense_date >= date_from)
    if date_to:
        query = query.filter(Expense.expense_date <= date_to)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(Expense.description.ilike(term), Expense.category.ilike(term)))

    expenses = query.order_by(Expense.expense_date.desc(), Expense.id.desc()).all()
    log_event("expenses", operator.label, "List expenses", f"total={len(expenses)}")
    return expenses


@router.get("/{expense_id}", response_model=ExpenseRead)
def get_expense(expense_id: int = Path(..., gt=0), db: Session = Depends(connection.get_db)):
    return _get_expense(db, expense_id)


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense: ExpenseCreate,
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    new_expense = Expense(**_enum_values(expense.model_dump()), created_by=operator.email or None)
    db.add(new_expense)
    _commit(db, operator, "Create expense")
    db.refresh(new_expense)
    log_event(
        "expenses", operator.label, "Create expense",
        f"id={new_expense.id} category={new_expense.category} amount={new_expense.amount}"
    )
    return new_expense


@router.put("/{expense_id}", response_model=ExpenseRead)
def update_expense(
    data: ExpenseUpdate,
    expense_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(get_operator),
):
    expense = _get_expense(db, expense_id)
    changes = _enum_values(data.model_dump(exclude_unset=True))
    for field, value in changes.items():
        setattr(expense, field, value)
    _commit(db, operator, "Update expense")
    db.refresh(expense)
    log_event("expenses", operator.label, "Update expense", f"id={expense_id} fields={sorted(changes)}")
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int = Path(..., gt=0),
    db: Session = Depends(connection.get_db),
    operator: OperatorContext = Depends(require_admin),
):
    expense = _get_expense(db, expense_id)
    db.delete(expense)
    _commit(db, operator, "Delete expense")
    log_event("expenses", operator.label, "Delete expense", f"id={expense_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
