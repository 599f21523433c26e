import uuid
from sqlalchemy import Boolean, Column, String, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False)
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    owner = relationship("Owner", back_populates="properties")
    units = relationship("Unit", back_populates="property")
    contracts = relationship("PropertyContract", back_populates="property")
