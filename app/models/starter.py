"""
Starter (new hire) model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class Starter(Base):
    __tablename__ = "starters"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    entity_id = Column(Integer, ForeignKey("entities.id"), nullable=True, index=True)
    region = Column(String, nullable=True)
    role_title = Column(String, nullable=True)
    via = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    # Wall-clock time in the business timezone (settings.TZ); digest windows compare against it
    start_date = Column(DateTime, nullable=False, index=True)
    # ISO-8601 week/year of start_date in the business timezone
    week_number = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False, index=True)

    is_cancelled = Column(Boolean, nullable=False, default=False, index=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    cancel_reason = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    entity = relationship("Entity")
    tasks = relationship("Task", back_populates="starter", cascade="all, delete-orphan")
    materials = relationship("StarterMaterial", back_populates="starter", cascade="all, delete-orphan")
