from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow

MassIntentionType = Enum(
    "THANKSGIVING",
    "DECEASED",
    "HEALTH",
    "BIRTHDAY",
    "ANNIVERSARY",
    "SPECIAL",
    "OTHER",
    name="mass_intention_type",
)


class MassIntention(Base):
    __tablename__ = "mass_intentions"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="CASCADE"), nullable=False, index=True)
    intention_for = Column(String(255), nullable=False)
    type = Column(MassIntentionType, nullable=False, default="OTHER")
    requested_date = Column(DateTime, nullable=False, index=True)
    requested_by = Column(String(200), nullable=True)
    notes = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=True)
    is_paid = Column(Boolean, default=False, nullable=False)
    paid_at = Column(DateTime, nullable=True)
    payment_method = Column(String(60), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    community = relationship("Community", back_populates="mass_intentions")
