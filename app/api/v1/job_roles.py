"""
Job role endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user, require_admin
from app.models.user import User
from app.schemas.job_role import (
    JobRoleCreate,
    JobRoleUpdate,
    JobRoleOut,
    JobRoleMaterialAdd,
    JobRoleMaterialUpdate,
    JobRoleMaterialOut,
)
from app.services import job_role_service

router = APIRouter()


@router.get("", response_model=List[JobRoleOut])
async def list_job_roles_endpoint(
    entity_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Job roles of the entities visible to the current user"""
    return job_role_service.list_job_roles(db, current_user, entity_id=entity_id)


@router.post("", response_model=JobRoleOut, status_code=201)
async def create_job_role_endpoint(
    data: JobRoleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return job_role_service.create_job_role(db, data, current_user.id)


@router.patch("/{job_role_id}", response_model=JobRoleOut)
async def update_job_role_endpoint(
    job_role_id: int,
    data: JobRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return job_role_service.update_job_role(db, job_role_id, data, current_user.id)


@router.delete("/{job_role_id}", status_code=204)
async def delete_job_role_endpoint(
    job_role_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """409 with counts while blocked periods reference the role"""
    job_role_service.delete_job_role(db, job_role_id, current_user.id)
    return None


@router.get("/{job_role_id}/materials", response_model=List[JobRoleMaterialOut])
async def list_role_materials_endpoint(
    job_role_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return job_role_service.list_role_materials(db, job_role_id)


@router.post("/{job_role_id}/materials", response_model=JobRoleMaterialOut, status_code=201)
async def add_role_material_endpoint(
    job_role_id: int,
    data: JobRoleMaterialAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return job_role_service.add_role_material(db, job_role_id, data, current_user.id)


@router.patch("/{job_role_id}/materials/{material_id}", response_model=JobRoleMaterialOut)
async def update_role_material_endpoint(
    job_role_id: int,
    material_id: int,
    data: JobRoleMaterialUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return job_role_service.update_role_material(db, job_role_id, material_id, data, current_user.id)


@router.delete("/{job_role_id}/materials/{material_id}", status_code=204)
async def remove_role_material_endpoint(
    job_role_id: int,
    material_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    job_role_service.remove_role_material(db, job_role_id, material_id, current_user.id)
    return None
