from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from shared.core.database import Base


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(64), primary_key=True)
    value = Column(String(255), nullable=True)
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
