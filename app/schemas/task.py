"""
Task, task template and task assignment schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_serializer, ConfigDict

from app.models.task import TaskType, TaskStatus, TaskPriority, NotifyChannel
from app.schemas.common import ser_utc


class TaskTemplateCreate(BaseModel):
    type: TaskType
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    days_until_due: int = Field(default=0, description="Negative = before the start date")
    is_active: bool = True
    auto_assign: bool = True
    for_entity_ids: List[int] = Field(default_factory=list)
    for_job_role_titles: List[str] = Field(default_factory=list)


class TaskTemplateUpdate(BaseModel):
    type: Optional[TaskType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    days_until_due: Optional[int] = None
    is_active: Optional[bool] = None
    auto_assign: Optional[bool] = None
    for_entity_ids: Optional[List[int]] = None
    for_job_role_titles: Optional[List[str]] = None


class TaskTemplateOut(BaseModel):
    id: int
    type: TaskType
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    days_until_due: int
    is_active: bool
    auto_assign: bool
    for_entity_ids: List[int] = []
    for_job_role_titles: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class TaskCreate(BaseModel):
    """Manually created task"""
    type: TaskType = TaskType.CUSTOM
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    starter_id: Optional[int] = None
    entity_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to_id: Optional[int] = None
    due_date: Optional[datetime] = None


class TaskComplete(BaseModel):
    completion_notes: Optional[str] = Field(None, max_length=5000)


class TaskOut(BaseModel):
    id: int
    type: TaskType
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    starter_id: Optional[int] = None
    entity_id: Optional[int] = None
    template_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    assigned_at: Optional[datetime] = None
    due_date: Optional[datetime] = None
    created_by_id: Optional[int] = None
    completed_by_id: Optional[int] = None
    completed_at: Optional[datetime] = None
    completion_notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("assigned_at", "completed_at", "created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return ser_utc(dt)


class TaskAssignmentSet(BaseModel):
    """Set (upsert) the responsible user for an entity/task type; entity_id None = global"""
    entity_id: Optional[int] = None
    task_type: TaskType
    assigned_to_id: int
    notify_channel: NotifyChannel = NotifyChannel.IN_APP


class TaskAssignmentOut(BaseModel):
    id: int
    entity_id: Optional[int] = None
    task_type: TaskType
    assigned_to_id: int
    notify_channel: NotifyChannel

    model_config = ConfigDict(from_attributes=True)


class ResponsibilityOut(BaseModel):
    user_id: int
    entity_id: Optional[int] = None
    task_type: TaskType
    responsible: bool
