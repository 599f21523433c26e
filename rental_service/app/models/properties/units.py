import uuid
from sqlalchemy import Boolean, Column, String, Numeric, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class Unit(Base):
    __tablename__ = "units"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False)
    name = Column(String(100), nullable=False)
    rent_price = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    property = relationship("Property", back_populates="units")
    contracts = relationship("UnitContract", back_populates="unit")
