from __future__ import annotations

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow

EntityStatus = Enum("ACTIVE", "INACTIVE", name="entity_status")


class Diocese(Base):
    __tablename__ = "dioceses"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(60), nullable=True)
    zip_code = Column(String(20), nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    logo_url = Column(String(500), nullable=True)
    bishop_name = Column(String(200), nullable=True)
    status = Column(EntityStatus, nullable=False, default="ACTIVE")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    parishes = relationship("Parish", back_populates="diocese", order_by="Parish.name")
