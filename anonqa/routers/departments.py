from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from anonqa.database import get_db
from anonqa.dependencies import get_current_identity, get_optional_identity
from anonqa.permissions import Identity
from anonqa.schemas.department import (
    Department, DepartmentAdmin, DepartmentAdminAssign, DepartmentCreate, DepartmentUpdate
)
from anonqa.services import departments as department_service
from anonqa.services import roles as role_service

router = APIRouter()


@router.get("/", response_model=List[Department])
def list_departments(
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity)
):
    return department_service.list_departments(db, identity)


@router.post("/", response_model=Department, status_code=201)
def create_department(
    data: DepartmentCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return department_service.create_department(db, identity, data.name, data.description)


@router.put("/{department_id}", response_model=Department)
def update_department(
    department_id: int,
    data: DepartmentUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return department_service.update_department(
        db, identity, department_id, name=data.name, description=data.description
    )


@router.delete("/{department_id}", status_code=204)
def delete_department(
    department_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    department_service.delete_department(db, identity, department_id)


# 部門管理員
@router.get("/{department_id}/admins", response_model=List[DepartmentAdmin])
def list_admins(
    department_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return role_service.list_department_admins(db, identity, department_id)


@router.post("/{department_id}/admins", response_model=DepartmentAdmin, status_code=201)
def assign_admin(
    department_id: int,
    data: DepartmentAdminAssign,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return role_service.assign_department_admin(db, identity, department_id, data.user_id)


@router.delete("/{department_id}/admins/{user_id}", status_code=204)
def remove_admin(
    department_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    role_service.remove_department_admin(db, identity, department_id, user_id)
