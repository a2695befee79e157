"""
Task models: templates, generated/manual tasks and responsibility assignments
"""
import enum

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class TaskType(str, enum.Enum):
    IT_SETUP = "IT_SETUP"
    HR_ADMIN = "HR_ADMIN"
    FACILITIES = "FACILITIES"
    MANAGER_ACTION = "MANAGER_ACTION"
    CUSTOM = "CUSTOM"


class TaskStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    BLOCKED = "BLOCKED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class NotifyChannel(str, enum.Enum):
    IN_APP = "IN_APP"
    EMAIL = "EMAIL"
    BOTH = "BOTH"


class TaskTemplate(Base):
    __tablename__ = "task_templates"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)
    # Negative values put the due date before the start date
    days_until_due = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    auto_assign = Column(Boolean, nullable=False, default=True)
    # Empty list means "all entities" / "all job roles"
    for_entity_ids = Column(JSON, nullable=False, default=list)
    for_job_role_titles = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default=TaskStatus.PENDING.value, index=True)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)

    starter_id = Column(Integer, ForeignKey("starters.id", ondelete="CASCADE"), nullable=True, index=True)
    entity_id = Column(Integer, ForeignKey("entities.id"), nullable=True, index=True)
    template_id = Column(Integer, ForeignKey("task_templates.id", ondelete="SET NULL"), nullable=True)

    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    due_date = Column(DateTime, nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    completion_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    starter = relationship("Starter", back_populates="tasks")
    entity = relationship("Entity")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])


class TaskAssignment(Base):
    __tablename__ = "task_assignments"

    id = Column(Integer, primary_key=True, index=True)
    # NULL entity = global fallback for the task type
    entity_id = Column(Integer, ForeignKey("entities.id", ondelete="CASCADE"), nullable=True, index=True)
    task_type = Column(String, nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    notify_channel = Column(String, nullable=False, default=NotifyChannel.IN_APP.value)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    # Only effective for non-NULL entity_id; the global row is kept unique by the service
    __table_args__ = (
        UniqueConstraint('entity_id', 'task_type', name='uq_task_assignment_entity_type'),
    )

    entity = relationship("Entity")
    assigned_to = relationship("User")
