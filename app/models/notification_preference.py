"""
Per-entity digest opt-in flags for a user
"""
from sqlalchemy import Column, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base


class NotificationPreference(Base):
    __tablename__ = "notification_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    entity_id = Column(Integer, ForeignKey("entities.id", ondelete="CASCADE"), nullable=False, index=True)
    weekly_reminder = Column(Boolean, nullable=False, default=True)
    monthly_summary = Column(Boolean, nullable=False, default=True)
    quarterly_summary = Column(Boolean, nullable=False, default=True)
    yearly_summary = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint('user_id', 'entity_id', name='uq_notification_preference_user_entity'),
    )

    user = relationship("User", back_populates="notification_preferences")
    entity = relationship("Entity")
