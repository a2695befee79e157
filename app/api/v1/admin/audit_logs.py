"""
Audit log read access (there are deliberately no write endpoints)
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, require_admin
from app.models.user import User
from app.schemas.audit import AuditLogOut
from app.services.audit_service import list_audit_logs

router = APIRouter()


@router.get("", response_model=List[AuditLogOut])
async def list_audit_logs_endpoint(
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return list_audit_logs(db, action=action, target_type=target_type, limit=limit)
