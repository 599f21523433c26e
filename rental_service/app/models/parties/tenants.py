import uuid
from sqlalchemy import Boolean, Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    phone = Column(String(32), nullable=True)
    email = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    contracts = relationship("UnitContract", back_populates="tenant")
