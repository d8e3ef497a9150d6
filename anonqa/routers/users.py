from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from anonqa.database import get_db
from anonqa.dependencies import get_current_identity
from anonqa.models.role import AppRole
from anonqa.permissions import Identity
from anonqa.schemas.role import RoleAssign, UserRoles
from anonqa.schemas.user import Profile, ProfileUpdate, PublicProfile
from anonqa.services import roles as role_service
from anonqa.services import users as user_service

router = APIRouter()


@router.get("/", response_model=List[Profile])
def list_users(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return user_service.list_users(db, identity, search=search)


@router.get("/me", response_model=Profile)
def my_profile(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return user_service.get_my_profile(db, identity)


@router.put("/me", response_model=Profile)
def update_my_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return user_service.update_my_profile(
        db, identity, full_name=data.full_name, avatar_url=data.avatar_url, department_id=data.department_id
    )


@router.get("/{user_id}", response_model=Profile)
def get_profile(user_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return user_service.get_profile(db, identity, user_id)


@router.get("/{user_id}/public", response_model=PublicProfile)
def get_public_profile(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return user_service.get_public_profile(db, identity, user_id)


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    user_service.delete_user(db, identity, user_id)


# 角色管理
@router.get("/{user_id}/roles", response_model=UserRoles)
def get_roles(user_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return UserRoles(user_id=user_id, roles=role_service.list_user_roles(db, identity, user_id))


@router.post("/{user_id}/roles", response_model=UserRoles, status_code=201)
def assign_role(
    user_id: int,
    data: RoleAssign,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return UserRoles(user_id=user_id, roles=role_service.assign_role(db, identity, user_id, data.role))


@router.delete("/{user_id}/roles/{role}", response_model=UserRoles)
def remove_role(
    user_id: int,
    role: AppRole,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return UserRoles(user_id=user_id, roles=role_service.remove_role(db, identity, user_id, role))
