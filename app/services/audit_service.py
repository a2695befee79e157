"""
Audit logging service (append-only)
"""
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from app.models.audit_log import AuditLog
from app.utils.json_serializer import sanitize_for_json
from typing import Optional, Dict, Any, List


def log_audit(
    db: Session,
    actor_id: Optional[int],
    action: str,
    target_type: str,
    target_id: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        actor_id: ID of the user performing the action (None for cron/system)
        action: Action type (e.g., "CREATE", "UPDATE", "DELETE", "CANCEL_STARTER", "SET_ASSIGNMENT")
        target_type: Type of record (e.g., "starter", "booking", "task_assignment")
        target_id: ID of the affected record (optional)
        meta: Additional metadata as dictionary (optional)

    Returns:
        Created AuditLog instance
    """
    # Serialize meta to JSON-safe values
    safe_meta = sanitize_for_json(meta) if meta is not None else None

    # Explicitly set created_at to avoid SQLite issues with server_default
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        meta_json=safe_meta,
        created_at=datetime.now(timezone.utc)
    )
    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)
    return audit_log


def list_audit_logs(
    db: Session,
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    limit: int = 100
) -> List[AuditLog]:
    """Most recent audit entries first"""
    query = db.query(AuditLog)
    if action:
        query = query.filter(AuditLog.action == action)
    if target_type:
        query = query.filter(AuditLog.target_type == target_type)
    return query.order_by(AuditLog.id.desc()).limit(limit).all()
