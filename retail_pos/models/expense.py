from sqlalchemy import Column, Date, DateTime, Numeric, String, Text
from sqlalchemy.sql import func

from retail_pos.core.database import Base
from retail_pos.models.catalog import generate_custom_id


class Expense(Base):
    """Operating expense entry; date defaults to today."""
    __tablename__ = "expenses"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("EXP"))
    expense_date = Column(Date, nullable=False, server_default=func.current_date(), index=True)
    category = Column(String(100), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(Text, nullable=True)
    payment_mode = Column(String(50), nullable=True)
    reference = Column(String(100), nullable=True)
    vendor = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
