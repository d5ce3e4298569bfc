from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow
from parish_api.models.diocese import EntityStatus


class Community(Base):
    __tablename__ = "communities"

    id = Column(Integer, primary_key=True)
    parish_id = Column(Integer, ForeignKey("parishes.id", ondelete="RESTRICT"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(60), nullable=True)
    zip_code = Column(String(20), nullable=True)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    logo_url = Column(String(500), nullable=True)
    coordinator_name = Column(String(200), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    status = Column(EntityStatus, nullable=False, default="ACTIVE")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    parish = relationship("Parish", back_populates="communities")
    members = relationship("Member", back_populates="community", order_by="Member.full_name")
    events = relationship("Event", back_populates="community", order_by="Event.start_date")
    pastorals = relationship("CommunityPastoral", back_populates="community", cascade="all, delete-orphan")
    mass_intentions = relationship("MassIntention", back_populates="community", cascade="all, delete-orphan")
    mass_schedules = relationship("MassSchedule", back_populates="community", cascade="all, delete-orphan")
    news = relationship("News", back_populates="community", cascade="all, delete-orphan")
    prayer_requests = relationship("PrayerRequest", back_populates="community", cascade="all, delete-orphan")
