"""
User-Entity membership model
"""
from sqlalchemy import Column, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base


class Membership(Base):
    __tablename__ = "memberships"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    entity_id = Column(Integer, ForeignKey("entities.id"), nullable=False, index=True)
    can_edit = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'entity_id', name='uq_membership_user_entity'),
    )

    # Relationships
    user = relationship("User", back_populates="memberships")
    entity = relationship("Entity", back_populates="memberships")
