"""
Job role service - per-entity role catalogue and the materials each role needs
"""
from typing import Iterable, List, Optional, Set

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.blocked_period import BlockedPeriod
from app.models.entity import Entity
from app.models.job_role import JobRole
from app.models.material import Material, JobRoleMaterial
from app.models.user import User
from app.schemas.job_role import (
    JobRoleCreate,
    JobRoleUpdate,
    JobRoleMaterialAdd,
    JobRoleMaterialUpdate,
)
from app.services.access_service import apply_visibility
from app.services.audit_service import log_audit


def get_job_role_or_404(db: Session, job_role_id: int) -> JobRole:
    job_role = db.query(JobRole).filter(JobRole.id == job_role_id).first()
    if not job_role:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job role with id {job_role_id} not found"
        )
    return job_role


def _check_unique_title(db: Session, entity_id: int, title: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(JobRole).filter(
        JobRole.entity_id == entity_id,
        func.lower(JobRole.title) == func.lower(title),
    )
    if exclude_id is not None:
        query = query.filter(JobRole.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Job role '{title}' already exists for this entity"
        )


def list_job_roles(db: Session, user: User, entity_id: Optional[int] = None) -> List[JobRole]:
    """Job roles of the entities the user can see"""
    query = apply_visibility(db.query(JobRole), user, JobRole.entity_id)
    if entity_id is not None:
        query = query.filter(JobRole.entity_id == entity_id)
    return query.order_by(JobRole.entity_id, JobRole.sort_order, JobRole.title).all()


def known_titles(db: Session) -> Set[str]:
    """Every job role title in the catalogue, across entities"""
    return {title for (title,) in db.query(JobRole.title).distinct().all()}


def check_titles_exist(db: Session, titles: Iterable[str]) -> None:
    """
    Raises:
        HTTPException: 400 listing titles that no job role carries
    """
    unknown = sorted(set(titles) - known_titles(db))
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Unknown job role titles", "titles": unknown}
        )


def create_job_role(db: Session, data: JobRoleCreate, actor_id: int) -> JobRole:
    if not db.query(Entity).filter(Entity.id == data.entity_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entity with id {data.entity_id} not found"
        )
    title = data.title.strip()
    _check_unique_title(db, data.entity_id, title)

    job_role = JobRole(
        entity_id=data.entity_id,
        title=title,
        description=data.description,
        is_active=data.is_active,
        sort_order=data.sort_order,
    )
    db.add(job_role)
    db.commit()
    db.refresh(job_role)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="CREATE",
        target_type="job_role",
        target_id=job_role.id,
        meta={"title": job_role.title, "entity_id": job_role.entity_id}
    )
    return job_role


def update_job_role(db: Session, job_role_id: int, data: JobRoleUpdate, actor_id: int) -> JobRole:
    job_role = get_job_role_or_404(db, job_role_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("title") is not None:
        update_data["title"] = update_data["title"].strip()
        _check_unique_title(db, job_role.entity_id, update_data["title"], exclude_id=job_role_id)

    for field, value in update_data.items():
        if value is None and field != "description":
            continue
        setattr(job_role, field, value)
    db.commit()
    db.refresh(job_role)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE",
        target_type="job_role",
        target_id=job_role.id,
        meta={"title": job_role.title, "changes": sorted(update_data)}
    )
    return job_role


def delete_job_role(db: Session, job_role_id: int, actor_id: int) -> None:
    """
    Delete a job role together with its material links

    Raises:
        HTTPException: 409 with the blocked period count while periods reference the role
    """
    job_role = get_job_role_or_404(db, job_role_id)
    period_count = db.query(BlockedPeriod).filter(BlockedPeriod.job_role_id == job_role_id).count()
    if period_count:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Job role is still referenced", "blocking": {"blocked_periods": period_count}}
        )

    title = job_role.title
    material_count = len(job_role.materials)
    db.delete(job_role)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="DELETE",
        target_type="job_role",
        target_id=job_role_id,
        meta={"title": title, "removed_material_links": material_count}
    )


def _get_link_or_404(db: Session, job_role_id: int, material_id: int) -> JobRoleMaterial:
    link = db.query(JobRoleMaterial).filter(
        JobRoleMaterial.job_role_id == job_role_id,
        JobRoleMaterial.material_id == material_id,
    ).first()
    if not link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Material is not linked to this job role"
        )
    return link


def list_role_materials(db: Session, job_role_id: int) -> List[JobRoleMaterial]:
    get_job_role_or_404(db, job_role_id)
    return db.query(JobRoleMaterial).join(Material).filter(
        JobRoleMaterial.job_role_id == job_role_id
    ).order_by(Material.sort_order, Material.name).all()


def add_role_material(db: Session, job_role_id: int, data: JobRoleMaterialAdd, actor_id: int) -> JobRoleMaterial:
    """
    Raises:
        HTTPException: 404 unknown role or material, 409 when already linked
    """
    job_role = get_job_role_or_404(db, job_role_id)
    material = db.query(Material).filter(Material.id == data.material_id).first()
    if not material:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Material with id {data.material_id} not found"
        )
    exists = db.query(JobRoleMaterial).filter(
        JobRoleMaterial.job_role_id == job_role_id,
        JobRoleMaterial.material_id == data.material_id,
    ).first()
    if exists:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Material is already linked to this job role"
        )

    link = JobRoleMaterial(
        job_role_id=job_role_id,
        material_id=data.material_id,
        is_required=data.is_required,
        notes=data.notes,
    )
    db.add(link)
    db.commit()
    db.refresh(link)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="CREATE",
        target_type="job_role_material",
        target_id=link.id,
        meta={"job_role": job_role.title, "material": material.name}
    )
    return link


def update_role_material(
    db: Session,
    job_role_id: int,
    material_id: int,
    data: JobRoleMaterialUpdate,
    actor_id: int,
) -> JobRoleMaterial:
    link = _get_link_or_404(db, job_role_id, material_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("is_required") is not None:
        link.is_required = update_data["is_required"]
    if "notes" in update_data:
        link.notes = update_data["notes"]
    db.commit()
    db.refresh(link)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE",
        target_type="job_role_material",
        target_id=link.id,
        meta={"job_role": link.job_role.title, "material": link.material.name}
    )
    return link


def remove_role_material(db: Session, job_role_id: int, material_id: int, actor_id: int) -> None:
    link = _get_link_or_404(db, job_role_id, material_id)
    link_id = link.id
    meta = {"job_role": link.job_role.title, "material": link.material.name}
    db.delete(link)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="DELETE",
        target_type="job_role_material",
        target_id=link_id,
        meta=meta
    )
