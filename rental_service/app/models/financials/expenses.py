import uuid
from sqlalchemy import Column, String, Date, Numeric, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class Expense(Base):
    """Maintenance or other cost deducted from an owner's payout."""
    __tablename__ = "expenses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False)
    unit_id = Column(Uuid, ForeignKey("units.id"), nullable=True)
    date = Column(Date, nullable=False)
    cost = Column(Numeric(14, 2), nullable=False)
    category = Column(String(32), default="maintenance")  # maintenance | utilities | other
    description = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)

    property = relationship("Property")
    unit = relationship("Unit")
