from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow

EVENT_TYPES = (
    "MASS",
    "MEETING",
    "CELEBRATION",
    "RETREAT",
    "FORMATION",
    "SOCIAL",
    "PASTORAL_MEETING",
    "PASTORAL_ACTIVITY",
    "OTHER",
)
EventType = Enum(*EVENT_TYPES, name="event_type")
EventStatus = Enum("DRAFT", "PUBLISHED", "CANCELLED", "COMPLETED", name="event_status")
RecurrenceType = Enum("DAILY", "WEEKLY", "MONTHLY", "CUSTOM", name="recurrence_type")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="RESTRICT"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(EventType, nullable=False, default="OTHER")
    status = Column(EventStatus, nullable=False, default="PUBLISHED")
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=True)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    is_public = Column(Boolean, default=True, nullable=False)
    max_participants = Column(Integer, nullable=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurrence_type = Column(RecurrenceType, nullable=True)
    recurrence_interval = Column(Integer, nullable=True)
    recurrence_days = Column(JSON, nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    parent_event_id = Column(Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    community = relationship("Community", back_populates="events")
    parent_event = relationship("Event", remote_side=[id], back_populates="occurrences")
    occurrences = relationship("Event", back_populates="parent_event")
    participants = relationship("EventParticipant", back_populates="event", cascade="all, delete-orphan")
    pastorals = relationship("EventPastoral", back_populates="event", cascade="all, delete-orphan")
    schedules = relationship(
        "Schedule", back_populates="event", cascade="all, delete-orphan", order_by="Schedule.date"
    )


class EventParticipant(Base):
    __tablename__ = "event_participants"
    __table_args__ = (UniqueConstraint("event_id", "member_id", name="uq_event_participant"),)

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    registered_at = Column(DateTime, default=utcnow, nullable=False)
    attended = Column(Boolean, default=False, nullable=False)

    event = relationship("Event", back_populates="participants")
    member = relationship("Member", back_populates="event_participations")


class EventPastoral(Base):
    __tablename__ = "event_pastorals"
    __table_args__ = (UniqueConstraint("event_id", "community_pastoral_id", name="uq_event_pastoral"),)

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    community_pastoral_id = Column(
        Integer, ForeignKey("community_pastorals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = Column(String(120), nullable=True)
    is_leader = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    event = relationship("Event", back_populates="pastorals")
    community_pastoral = relationship("CommunityPastoral", back_populates="event_links")
    assignments = relationship("EventPastoralAssignment", back_populates="event_pastoral", cascade="all, delete-orphan")


class EventPastoralAssignment(Base):
    __tablename__ = "event_pastoral_assignments"

    id = Column(Integer, primary_key=True)
    event_pastoral_id = Column(Integer, ForeignKey("event_pastorals.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(120), nullable=True)
    notes = Column(Text, nullable=True)
    checked_in = Column(Boolean, default=False, nullable=False)
    checked_in_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    event_pastoral = relationship("EventPastoral", back_populates="assignments")
    member = relationship("Member", back_populates="pastoral_assignments")
