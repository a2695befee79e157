"""
User and membership endpoints
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user, require_admin
from app.models.user import User
from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserOut,
    MembershipCreate,
    MembershipOut,
)
from app.services import user_service

router = APIRouter()


@router.get("/me", response_model=UserOut)
async def get_me(current_user: User = Depends(get_current_user)):
    """Current user with memberships"""
    return current_user


@router.get("", response_model=List[UserOut])
async def list_users_endpoint(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """List users (admin only)"""
    return user_service.list_users(db, skip=skip, limit=limit)


@router.post("", response_model=UserOut, status_code=201)
async def create_user_endpoint(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Create a user (admin only)"""
    return user_service.create_user(db, user_data, current_user.id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user_endpoint(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Update a user, including role changes (admin only)"""
    return user_service.update_user(db, user_id, user_data, current_user.id)


@router.delete("/{user_id}", status_code=204)
async def delete_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Delete a user (admin only; not yourself)"""
    user_service.delete_user(db, user_id, current_user.id)
    return None


@router.get("/{user_id}/memberships", response_model=List[MembershipOut])
async def list_memberships_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return user_service.list_memberships(db, user_id)


@router.post("/{user_id}/memberships", response_model=MembershipOut, status_code=201)
async def add_membership_endpoint(
    user_id: int,
    data: MembershipCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Grant entity access (admin only)"""
    return user_service.add_membership(db, user_id, data, current_user.id)


@router.delete("/{user_id}/memberships/{entity_id}", status_code=204)
async def remove_membership_endpoint(
    user_id: int,
    entity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    user_service.remove_membership(db, user_id, entity_id, current_user.id)
    return None
