"""
Digest email template administration
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, require_admin
from app.models.user import User
from app.schemas.digest import EmailTemplateOut, EmailTemplateUpsert
from app.services import email_template_service
from app.services.digest_windows import DigestType

router = APIRouter()


@router.get("", response_model=List[EmailTemplateOut])
async def list_email_templates_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """One template per digest type; built-in defaults where no override exists"""
    return email_template_service.list_templates(db)


@router.put("/{digest_type}", response_model=EmailTemplateOut)
async def upsert_email_template_endpoint(
    digest_type: DigestType,
    data: EmailTemplateUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    row = email_template_service.upsert_template(db, digest_type, data, current_user.id)
    return EmailTemplateOut(
        id=row.id,
        type=digest_type,
        subject=row.subject,
        body=row.body,
        description=row.description,
        is_active=row.is_active,
        is_default=False,
    )
