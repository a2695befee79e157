"""
Audit log model (append-only)
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from app.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    # NULL for system actors (cron jobs, bootstrap)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String, nullable=False, index=True)  # e.g., "CREATE", "UPDATE", "CANCEL_STARTER", "EMAIL_SENT"
    target_type = Column(String, nullable=False)  # e.g., "starter", "booking", "task_assignment"
    target_id = Column(Integer, nullable=True)
    meta_json = Column(JSON, nullable=True)
    # Set explicitly by the service (SQLite server_default quirks)
    created_at = Column(DateTime(timezone=True), nullable=False)
