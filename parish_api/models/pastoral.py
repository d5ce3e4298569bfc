from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow
from parish_api.models.diocese import EntityStatus

PastoralRole = Enum("COORDINATOR", "VICE_COORDINATOR", "SECRETARY", "MEMBER", name="pastoral_role")


class GlobalPastoral(Base):
    __tablename__ = "global_pastorals"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    mission = Column(Text, nullable=True)
    icon_url = Column(String(500), nullable=True)
    color_hex = Column(String(9), nullable=True)
    status = Column(EntityStatus, nullable=False, default="ACTIVE")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    community_pastorals = relationship("CommunityPastoral", back_populates="global_pastoral")


class CommunityPastoral(Base):
    __tablename__ = "community_pastorals"
    __table_args__ = (UniqueConstraint("global_pastoral_id", "community_id", name="uq_community_pastoral"),)

    id = Column(Integer, primary_key=True)
    global_pastoral_id = Column(Integer, ForeignKey("global_pastorals.id", ondelete="RESTRICT"), nullable=False)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    mission = Column(Text, nullable=True)
    photo_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    founded_at = Column(Date, nullable=True)
    status = Column(EntityStatus, nullable=False, default="ACTIVE")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    global_pastoral = relationship("GlobalPastoral", back_populates="community_pastorals")
    community = relationship("Community", back_populates="pastorals")
    groups = relationship("PastoralGroup", back_populates="community_pastoral", cascade="all, delete-orphan")
    members = relationship("PastoralMember", back_populates="community_pastoral", cascade="all, delete-orphan")
    event_links = relationship("EventPastoral", back_populates="community_pastoral", cascade="all, delete-orphan")


class PastoralGroup(Base):
    __tablename__ = "pastoral_groups"

    id = Column(Integer, primary_key=True)
    community_pastoral_id = Column(
        Integer, ForeignKey("community_pastorals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_group_id = Column(Integer, ForeignKey("pastoral_groups.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    photo_url = Column(String(500), nullable=True)
    status = Column(EntityStatus, nullable=False, default="ACTIVE")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    community_pastoral = relationship("CommunityPastoral", back_populates="groups")
    parent_group = relationship("PastoralGroup", remote_side=[id], back_populates="subgroups")
    subgroups = relationship("PastoralGroup", back_populates="parent_group")
    members = relationship("PastoralMember", back_populates="pastoral_group")


class PastoralMember(Base):
    __tablename__ = "pastoral_members"
    __table_args__ = (UniqueConstraint("community_pastoral_id", "member_id", name="uq_pastoral_member"),)

    id = Column(Integer, primary_key=True)
    community_pastoral_id = Column(
        Integer, ForeignKey("community_pastorals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pastoral_group_id = Column(Integer, ForeignKey("pastoral_groups.id", ondelete="SET NULL"), nullable=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(PastoralRole, nullable=False, default="MEMBER")
    is_active = Column(Boolean, default=True, nullable=False)
    joined_at = Column(DateTime, default=utcnow, nullable=False)

    community_pastoral = relationship("CommunityPastoral", back_populates="members")
    pastoral_group = relationship("PastoralGroup", back_populates="members")
    member = relationship("Member", back_populates="pastoral_memberships")
