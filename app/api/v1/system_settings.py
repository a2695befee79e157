"""
Public system settings read endpoint
"""
from fastapi import APIRouter, Depends
from app.core.deps import get_settings_snapshot
from app.schemas.system_setting import SettingsSnapshotOut
from app.services.settings_service import SettingsSnapshot

router = APIRouter()


@router.get("", response_model=SettingsSnapshotOut)
async def get_system_settings(snapshot: SettingsSnapshot = Depends(get_settings_snapshot)):
    """Current settings snapshot and its version"""
    return SettingsSnapshotOut(version=snapshot.version, values=snapshot.values)
