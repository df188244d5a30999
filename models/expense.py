"""
Operating expenses of the resort
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, Index
from database.connection import Base
from datetime import datetime


class Expense(Base):
    __tablename__ = "expenses"
    __table_args__ = (
        Index('idx_expenses_category', 'category'),
        Index('idx_expenses_expense_date', 'expense_date'),
    )

    id = Column(Integer, primary_key=True, index=True)
    expense_date = Column(Date, nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(String(255), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(50), nullable=True)
    created_by = Column(String(255), nullable=True)  # operator email

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Expense(id={self.id}, category='{self.category}', amount={self.amount})>"
