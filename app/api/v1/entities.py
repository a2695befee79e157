"""
Entity endpoints
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user, require_admin
from app.models.user import User
from app.schemas.entity import EntityCreate, EntityUpdate, EntityOut
from app.services import entity_service
from app.services.access_service import ensure_can_view

router = APIRouter()


@router.get("", response_model=List[EntityOut])
async def list_entities_endpoint(
    include_inactive: bool = Query(False, description="Admins only"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Entities visible to the current user"""
    return entity_service.list_entities(db, current_user, include_inactive=include_inactive)


@router.get("/{entity_id}", response_model=EntityOut)
async def get_entity_endpoint(
    entity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    entity = entity_service.get_entity_or_404(db, entity_id)
    ensure_can_view(current_user, entity.id)
    return entity


@router.post("", response_model=EntityOut, status_code=201)
async def create_entity_endpoint(
    entity_data: EntityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Create an entity (admin only)"""
    return entity_service.create_entity(db, entity_data, current_user.id)


@router.patch("/{entity_id}", response_model=EntityOut)
async def update_entity_endpoint(
    entity_id: int,
    entity_data: EntityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Update an entity (admin only)"""
    return entity_service.update_entity(db, entity_id, entity_data, current_user.id)


@router.delete("/{entity_id}", status_code=204)
async def delete_entity_endpoint(
    entity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Delete an unreferenced entity (admin only); 409 with counts otherwise"""
    entity_service.delete_entity(db, entity_id, current_user.id)
    return None
