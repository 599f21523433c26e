import uuid

from sqlalchemy import Column, String, Date, Integer, DateTime, Text, Uuid
from sqlalchemy.sql import func


class PaymentObligationMixin:
    """Fields every scheduled obligation carries, whichever way the money flows."""

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    payment_number = Column(String(48), unique=True, nullable=False)
    sequence = Column(Integer, nullable=False)
    due_date_start = Column(Date, nullable=False)
    due_date_end = Column(Date, nullable=False)
    month_year = Column(String(7), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def is_settled(self) -> bool:
        return self.settlement_date is not None
