"""
Database models
"""
from app.models.user import User, Role
from app.models.entity import Entity
from app.models.membership import Membership
from app.models.notification_preference import NotificationPreference
from app.models.starter import Starter
from app.models.task import (
    Task,
    TaskTemplate,
    TaskAssignment,
    TaskType,
    TaskStatus,
    TaskPriority,
    NotifyChannel,
)
from app.models.notification import Notification
from app.models.email_template import EmailTemplate
from app.models.room import Room, Booking, BookingStatus, BLOCKING_STATUSES
from app.models.audit_log import AuditLog
from app.models.system_setting import SystemSetting
from app.models.job_role import JobRole
from app.models.material import Material, JobRoleMaterial, StarterMaterial
from app.models.blocked_period import BlockedPeriod

__all__ = [
    "User",
    "Role",
    "Entity",
    "Membership",
    "NotificationPreference",
    "Starter",
    "Task",
    "TaskTemplate",
    "TaskAssignment",
    "TaskType",
    "TaskStatus",
    "TaskPriority",
    "NotifyChannel",
    "Notification",
    "EmailTemplate",
    "Room",
    "Booking",
    "BookingStatus",
    "BLOCKING_STATUSES",
    "AuditLog",
    "SystemSetting",
    "JobRole",
    "Material",
    "JobRoleMaterial",
    "StarterMaterial",
    "BlockedPeriod",
]
