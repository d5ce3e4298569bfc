from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from parish_api.core.db import Base, utcnow

USER_ROLES = (
    "SYSTEM_ADMIN",
    "DIOCESAN_ADMIN",
    "PARISH_ADMIN",
    "COMMUNITY_COORDINATOR",
    "PASTORAL_COORDINATOR",
    "VOLUNTEER",
    "FAITHFUL",
)
UserRole = Enum(*USER_ROLES, name="user_role")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)
    phone = Column(String(30), nullable=True)
    role = Column(UserRole, nullable=False, default="FAITHFUL")
    is_active = Column(Boolean, default=True, nullable=False)
    force_password_change = Column(Boolean, default=False, nullable=False)
    last_login_at = Column(DateTime, nullable=True)
    diocese_id = Column(Integer, ForeignKey("dioceses.id", ondelete="SET NULL"), nullable=True, index=True)
    parish_id = Column(Integer, ForeignKey("parishes.id", ondelete="SET NULL"), nullable=True, index=True)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    diocese = relationship("Diocese")
    parish = relationship("Parish")
    community = relationship("Community")
    member = relationship("Member", back_populates="user", uselist=False)
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True)
    token = Column(String(1024), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="refresh_tokens")
