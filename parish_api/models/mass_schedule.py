from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow

MassScheduleType = Enum("REGULAR", "SPECIAL", "CONFESSION", "ADORATION", name="mass_schedule_type")


class MassSchedule(Base):
    __tablename__ = "mass_schedules"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    time = Column(String(5), nullable=False)
    type = Column(MassScheduleType, nullable=False, default="REGULAR")
    notes = Column(Text, nullable=True)
    is_special = Column(Boolean, default=False, nullable=False)
    special_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    community = relationship("Community", back_populates="mass_schedules")
