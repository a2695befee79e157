"""
System settings writes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, require_admin
from app.models.user import User
from app.schemas.system_setting import SettingSet, SettingsSnapshotOut
from app.services.settings_service import load_snapshot, set_setting

router = APIRouter()


@router.put("", response_model=SettingsSnapshotOut)
async def set_system_setting_endpoint(
    data: SettingSet,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Set one key; returns the new snapshot"""
    set_setting(db, data.key, data.value, current_user.id)
    snapshot = load_snapshot(db)
    return SettingsSnapshotOut(version=snapshot.version, values=snapshot.values)
