"""
Digest preview (dry run, no email is sent)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, require_admin
from app.models.user import User
from app.schemas.digest import DigestPreviewRequest, DigestPreviewOut
from app.services.digest_service import preview_digest

router = APIRouter()


@router.post("/preview", response_model=DigestPreviewOut)
async def preview_digest_endpoint(
    request: DigestPreviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Recipients and counts the digest job would produce for the given day"""
    return preview_digest(db, request.type, request.today)
