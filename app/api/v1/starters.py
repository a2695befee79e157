"""
Starter endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user, get_settings_snapshot
from app.models.user import User
from app.schemas.starter import StarterCreate, StarterUpdate, StarterCancel, StarterOut
from app.schemas.job_role import StarterMaterialOut, StarterMaterialUpdate
from app.services import material_service, starter_service
from app.services.settings_service import SettingsSnapshot

router = APIRouter()


@router.get("", response_model=List[StarterOut])
async def list_starters_endpoint(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    entity_id: Optional[int] = None,
    search: Optional[str] = Query(None, max_length=200),
    include_cancelled: bool = True,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Starters visible to the current user"""
    return starter_service.list_starters(
        db,
        current_user,
        year=year,
        entity_id=entity_id,
        search=search,
        include_cancelled=include_cancelled,
    )


@router.get("/{starter_id}", response_model=StarterOut)
async def get_starter_endpoint(
    starter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return starter_service.get_starter(db, current_user, starter_id)


@router.post("", response_model=StarterOut, status_code=201)
def create_starter_endpoint(
    data: StarterCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    snapshot: SettingsSnapshot = Depends(get_settings_snapshot)
):
    """Create a starter; matching task templates generate its onboarding tasks"""
    return starter_service.create_starter(db, current_user, data, snapshot=snapshot)


@router.patch("/{starter_id}", response_model=StarterOut)
async def update_starter_endpoint(
    starter_id: int,
    data: StarterUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return starter_service.update_starter(db, current_user, starter_id, data)


@router.post("/{starter_id}/cancel", response_model=StarterOut)
def cancel_starter_endpoint(
    starter_id: int,
    data: StarterCancel,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    snapshot: SettingsSnapshot = Depends(get_settings_snapshot)
):
    """Cancel a starter and notify admins, global viewers, members and notify addresses"""
    return starter_service.cancel_starter(db, current_user, starter_id, data.reason, snapshot=snapshot)


@router.delete("/{starter_id}", status_code=204)
async def delete_starter_endpoint(
    starter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Hard delete (admin only)"""
    starter_service.delete_starter(db, current_user, starter_id)
    return None


@router.get("/{starter_id}/materials", response_model=List[StarterMaterialOut])
async def list_starter_materials_endpoint(
    starter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return material_service.list_starter_materials(db, current_user, starter_id)


@router.post("/{starter_id}/materials", response_model=List[StarterMaterialOut])
async def assign_starter_materials_endpoint(
    starter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Copy the job role's active materials onto the starter; returns the new rows"""
    return material_service.assign_from_job_role(db, current_user, starter_id)


@router.patch("/{starter_id}/materials/{material_id}", response_model=StarterMaterialOut)
async def update_starter_material_endpoint(
    starter_id: int,
    material_id: int,
    data: StarterMaterialUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Mark a material as handed out"""
    return material_service.update_starter_material(db, current_user, starter_id, material_id, data)
