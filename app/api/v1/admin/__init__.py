"""Admin API (HR_ADMIN only)."""
from fastapi import APIRouter
from app.api.v1.admin import audit_logs as admin_audit_logs
from app.api.v1.admin import cron as admin_cron
from app.api.v1.admin import email_templates as admin_email_templates
from app.api.v1.admin import materials as admin_materials
from app.api.v1.admin import rooms as admin_rooms
from app.api.v1.admin import system_settings as admin_system_settings
from app.api.v1.admin import task_templates as admin_task_templates

admin_router = APIRouter(prefix="/admin", tags=["admin"])
admin_router.include_router(admin_rooms.router, prefix="/rooms", tags=["admin-rooms"])
admin_router.include_router(admin_cron.router, prefix="/cron", tags=["admin-cron"])
admin_router.include_router(admin_email_templates.router, prefix="/email-templates", tags=["admin-email-templates"])
admin_router.include_router(admin_task_templates.router, prefix="/task-templates", tags=["admin-task-templates"])
admin_router.include_router(admin_materials.router, prefix="/materials", tags=["admin-materials"])
admin_router.include_router(admin_audit_logs.router, prefix="/audit-logs", tags=["admin-audit"])
admin_router.include_router(admin_system_settings.router, prefix="/system/settings", tags=["admin-settings"])
