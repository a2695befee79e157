"""
Main API router
"""
from fastapi import APIRouter

from app.api.v1 import (
    health,
    version,
    auth,
    users,
    entities,
    starters,
    tasks,
    task_assignments,
    notifications,
    rooms,
    bookings,
    system_settings,
    cron,
    job_roles,
    blocked_periods,
    stats,
)
from app.api.v1.admin import admin_router

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(entities.router, prefix="/entities", tags=["entities"])
api_router.include_router(starters.router, prefix="/starters", tags=["starters"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(task_assignments.router, prefix="/task-assignments", tags=["task-assignments"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(system_settings.router, prefix="/system/settings", tags=["system-settings"])
api_router.include_router(job_roles.router, prefix="/job-roles", tags=["job-roles"])
api_router.include_router(blocked_periods.router, prefix="/blocked-periods", tags=["blocked-periods"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
api_router.include_router(admin_router)
