from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow

MemberStatus = Enum("ACTIVE", "INACTIVE", "VISITOR", "DECEASED", "TRANSFERRED", name="member_status")


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="RESTRICT"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)
    full_name = Column(String(200), nullable=False)
    birth_date = Column(Date, nullable=True)
    cpf = Column(String(14), nullable=True, unique=True)
    rg = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    phone = Column(String(30), nullable=True)
    photo_url = Column(String(500), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(60), nullable=True)
    zip_code = Column(String(20), nullable=True)
    father_name = Column(String(200), nullable=True)
    mother_name = Column(String(200), nullable=True)
    occupation = Column(String(120), nullable=True)
    spouse_id = Column(Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(MemberStatus, nullable=False, default="ACTIVE")
    consent_given = Column(Boolean, default=False, nullable=False)
    consent_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    community = relationship("Community", back_populates="members")
    user = relationship("User", back_populates="member")
    spouse = relationship("Member", remote_side=[id])
    pastoral_memberships = relationship("PastoralMember", back_populates="member", cascade="all, delete-orphan")
    event_participations = relationship("EventParticipant", back_populates="member", cascade="all, delete-orphan")
    schedule_assignments = relationship(
        "ScheduleAssignment",
        back_populates="member",
        cascade="all, delete-orphan",
        order_by="ScheduleAssignment.created_at.desc()",
    )
    pastoral_assignments = relationship("EventPastoralAssignment", back_populates="member", cascade="all, delete-orphan")
    prayer_requests = relationship("PrayerRequest", back_populates="member")
