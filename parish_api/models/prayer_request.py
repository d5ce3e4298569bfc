from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow

PrayerCategory = Enum(
    "HEALTH", "FAMILY", "WORK", "SPIRITUAL", "THANKSGIVING", "OTHER", name="prayer_category"
)
PrayerRequestStatus = Enum("PENDING", "APPROVED", "REJECTED", name="prayer_request_status")


class PrayerRequest(Base):
    __tablename__ = "prayer_requests"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(PrayerCategory, nullable=False, default="OTHER")
    is_anonymous = Column(Boolean, default=False, nullable=False)
    status = Column(PrayerRequestStatus, nullable=False, default="PENDING")
    prayer_count = Column(Integer, default=0, nullable=False)
    moderated_at = Column(DateTime, nullable=True)
    moderated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    community = relationship("Community", back_populates="prayer_requests")
    member = relationship("Member", back_populates="prayer_requests")
    moderated_by = relationship("User")
