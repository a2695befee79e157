"""
Material catalogue administration
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, require_admin
from app.models.user import User
from app.schemas.job_role import MaterialCreate, MaterialUpdate, MaterialOut, MaterialWithUsageOut
from app.services import material_service

router = APIRouter()


@router.get("", response_model=List[MaterialWithUsageOut])
async def list_materials_endpoint(
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Catalogue with usage counts per material"""
    return material_service.list_materials(db, active_only=active_only)


@router.post("", response_model=MaterialOut, status_code=201)
async def create_material_endpoint(
    data: MaterialCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return material_service.create_material(db, data, current_user.id)


@router.patch("/{material_id}", response_model=MaterialOut)
async def update_material_endpoint(
    material_id: int,
    data: MaterialUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return material_service.update_material(db, material_id, data, current_user.id)


@router.delete("/{material_id}", status_code=204)
async def delete_material_endpoint(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """409 with usage counts while roles or starters use the material"""
    material_service.delete_material(db, material_id, current_user.id)
    return None
