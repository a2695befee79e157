"""
User model
"""
import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Role(str, enum.Enum):
    HR_ADMIN = "HR_ADMIN"
    ENTITY_EDITOR = "ENTITY_EDITOR"
    ENTITY_VIEWER = "ENTITY_VIEWER"
    GLOBAL_VIEWER = "GLOBAL_VIEWER"
    NONE = "NONE"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default=Role.NONE.value)
    password_hash = Column(String, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    locale = Column(String(5), nullable=False, default="nl")
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    # Relationships
    memberships = relationship(
        "Membership",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Membership.id",
    )
    notification_preferences = relationship(
        "NotificationPreference",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
