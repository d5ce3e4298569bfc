from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow
from parish_api.models.diocese import EntityStatus


class Parish(Base):
    __tablename__ = "parishes"

    id = Column(Integer, primary_key=True)
    diocese_id = Column(Integer, ForeignKey("dioceses.id", ondelete="RESTRICT"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(60), nullable=True)
    zip_code = Column(String(20), nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    logo_url = Column(String(500), nullable=True)
    priest_name = Column(String(200), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    status = Column(EntityStatus, nullable=False, default="ACTIVE")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    diocese = relationship("Diocese", back_populates="parishes")
    communities = relationship("Community", back_populates="parish", order_by="Community.name")
