"""
Material service - catalogue and per-starter handout tracking
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.job_role import JobRole
from app.models.material import Material, JobRoleMaterial, StarterMaterial
from app.models.starter import Starter
from app.models.user import User
from app.schemas.job_role import MaterialCreate, MaterialUpdate, StarterMaterialUpdate
from app.services.access_service import ensure_can_edit, ensure_can_view
from app.services.audit_service import log_audit
from app.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def _check_unique_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Material).filter(func.lower(Material.name) == func.lower(name))
    if exclude_id is not None:
        query = query.filter(Material.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Material with name '{name}' already exists"
        )


def get_material_or_404(db: Session, material_id: int) -> Material:
    material = db.query(Material).filter(Material.id == material_id).first()
    if not material:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Material with id {material_id} not found"
        )
    return material


def _usage_counts(db: Session, material_id: int) -> Dict[str, int]:
    return {
        "job_roles": db.query(JobRoleMaterial).filter(JobRoleMaterial.material_id == material_id).count(),
        "starters": db.query(StarterMaterial).filter(StarterMaterial.material_id == material_id).count(),
    }


def list_materials(db: Session, active_only: bool = False) -> List[Dict[str, Any]]:
    """Catalogue with the number of roles and starters using each material"""
    role_counts = dict(
        db.query(JobRoleMaterial.material_id, func.count(JobRoleMaterial.id))
        .group_by(JobRoleMaterial.material_id).all()
    )
    starter_counts = dict(
        db.query(StarterMaterial.material_id, func.count(StarterMaterial.id))
        .group_by(StarterMaterial.material_id).all()
    )
    query = db.query(Material)
    if active_only:
        query = query.filter(Material.is_active.is_(True))

    result = []
    for material in query.order_by(Material.sort_order, Material.name).all():
        result.append({
            "id": material.id,
            "name": material.name,
            "description": material.description,
            "category": material.category,
            "is_active": material.is_active,
            "sort_order": material.sort_order,
            "job_roles_count": role_counts.get(material.id, 0),
            "starters_count": starter_counts.get(material.id, 0),
        })
    return result


def create_material(db: Session, data: MaterialCreate, actor_id: int) -> Material:
    name = data.name.strip()
    _check_unique_name(db, name)
    material = Material(
        name=name,
        description=data.description,
        category=data.category,
        is_active=data.is_active,
        sort_order=data.sort_order,
    )
    db.add(material)
    db.commit()
    db.refresh(material)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="CREATE",
        target_type="material",
        target_id=material.id,
        meta={"name": material.name}
    )
    return material


def update_material(db: Session, material_id: int, data: MaterialUpdate, actor_id: int) -> Material:
    material = get_material_or_404(db, material_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("name") is not None:
        update_data["name"] = update_data["name"].strip()
        _check_unique_name(db, update_data["name"], exclude_id=material_id)

    for field, value in update_data.items():
        if value is None and field not in ("description", "category"):
            continue
        setattr(material, field, value)
    db.commit()
    db.refresh(material)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE",
        target_type="material",
        target_id=material.id,
        meta={"name": material.name, "changes": sorted(update_data)}
    )
    return material


def delete_material(db: Session, material_id: int, actor_id: int) -> None:
    """
    Raises:
        HTTPException: 409 with usage counts while roles or starters use the material
    """
    material = get_material_or_404(db, material_id)
    usage = _usage_counts(db, material_id)
    if any(usage.values()):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Material is in use; deactivate it instead", "blocking": usage}
        )

    name = material.name
    db.delete(material)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="DELETE",
        target_type="material",
        target_id=material_id,
        meta={"name": name}
    )


def _get_starter_or_404(db: Session, starter_id: int) -> Starter:
    starter = db.query(Starter).filter(Starter.id == starter_id).first()
    if not starter:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Starter with id {starter_id} not found"
        )
    return starter


def list_starter_materials(db: Session, user: User, starter_id: int) -> List[StarterMaterial]:
    starter = _get_starter_or_404(db, starter_id)
    ensure_can_view(user, starter.entity_id)
    return db.query(StarterMaterial).join(Material).filter(
        StarterMaterial.starter_id == starter_id
    ).order_by(Material.sort_order, Material.name).all()


def assign_from_job_role(db: Session, user: User, starter_id: int) -> List[StarterMaterial]:
    """
    Copy the active materials of the starter's job role onto the starter

    Materials the starter already has are skipped; returns only the new rows.

    Raises:
        HTTPException: 403 without edit rights, 400 when the starter has no
            role title or entity
    """
    starter = _get_starter_or_404(db, starter_id)
    ensure_can_edit(user, starter.entity_id)
    if not starter.role_title or starter.entity_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Starter has no role or entity assigned"
        )

    job_role = db.query(JobRole).filter(
        JobRole.entity_id == starter.entity_id,
        JobRole.title == starter.role_title,
    ).first()
    if not job_role:
        return []

    existing = {
        material_id for (material_id,) in
        db.query(StarterMaterial.material_id).filter(StarterMaterial.starter_id == starter_id).all()
    }
    created = []
    for link in job_role.materials:
        if not link.material.is_active or link.material_id in existing:
            continue
        row = StarterMaterial(starter_id=starter_id, material_id=link.material_id, notes=link.notes)
        db.add(row)
        created.append(row)

    if not created:
        return []
    db.commit()
    for row in created:
        db.refresh(row)

    log_audit(
        db=db,
        actor_id=user.id,
        action="ASSIGN_MATERIALS",
        target_type="starter",
        target_id=starter_id,
        meta={"job_role": job_role.title, "count": len(created)}
    )
    logger.info(f"Assigned {len(created)} materials to starter {starter_id}")
    return created


def update_starter_material(
    db: Session,
    user: User,
    starter_id: int,
    material_id: int,
    data: StarterMaterialUpdate,
) -> StarterMaterial:
    """Mark a material as handed out (or not)"""
    starter = _get_starter_or_404(db, starter_id)
    ensure_can_edit(user, starter.entity_id)
    row = db.query(StarterMaterial).filter(
        StarterMaterial.starter_id == starter_id,
        StarterMaterial.material_id == material_id,
    ).first()
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Material is not assigned to this starter"
        )

    row.is_provided = data.is_provided
    row.provided_at = now_utc() if data.is_provided else None
    row.provided_by = user.id if data.is_provided else None
    if "notes" in data.model_fields_set:
        row.notes = data.notes
    db.commit()
    db.refresh(row)

    log_audit(
        db=db,
        actor_id=user.id,
        action="UPDATE",
        target_type="starter_material",
        target_id=row.id,
        meta={"starter": starter.name, "material": row.material.name, "is_provided": row.is_provided}
    )
    return row
