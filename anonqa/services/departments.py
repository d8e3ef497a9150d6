from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from anonqa.errors import ConflictFailed
from anonqa.models.department import Department
from anonqa.permissions import Action, Identity, Resource, authorize
from anonqa.services.helpers import clean_text, commit_or_conflict, get_or_404

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 200


def list_departments(db: Session, identity: Identity) -> List[Department]:
    authorize(identity, Resource.DEPARTMENT, Action.READ)
    return db.query(Department).order_by(Department.name).all()


def _check_name_free(db: Session, name: str, exclude_id: Optional[int] = None):
    query = db.query(Department).filter(Department.name == name)
    if exclude_id is not None:
        query = query.filter(Department.id != exclude_id)
    if query.first():
        raise ConflictFailed(detail=f"部門名稱 {name} 已存在", reason="department_name_taken")


def create_department(db: Session, identity: Identity, name: str, description: Optional[str] = None) -> Department:
    authorize(identity, Resource.DEPARTMENT, Action.CREATE)
    name = clean_text(name, "name", NAME_MAX_LENGTH)
    _check_name_free(db, name)

    department = Department(name=name, description=(description or "").strip() or None)
    db.add(department)
    commit_or_conflict(db, detail=f"部門名稱 {name} 已存在", reason="department_name_taken")
    db.refresh(department)
    logger.info(f"已創建部門 ID={department.id}, 名稱={department.name}")
    return department


def update_department(
    db: Session,
    identity: Identity,
    department_id: int,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Department:
    authorize(identity, Resource.DEPARTMENT, Action.UPDATE)
    department = get_or_404(db, Department, department_id, detail=f"部門 {department_id} 不存在")

    if name is not None:
        name = clean_text(name, "name", NAME_MAX_LENGTH)
        _check_name_free(db, name, exclude_id=department_id)
        department.name = name
    if description is not None:
        department.description = description.strip() or None

    commit_or_conflict(db, detail=f"部門名稱 {name} 已存在", reason="department_name_taken")
    db.refresh(department)
    return department


def delete_department(db: Session, identity: Identity, department_id: int) -> None:
    """刪除部門；管理員關聯一併刪除，問題與用戶的部門欄位清空"""
    authorize(identity, Resource.DEPARTMENT, Action.DELETE)
    department = get_or_404(db, Department, department_id, detail=f"部門 {department_id} 不存在")
    db.delete(department)
    db.commit()
    logger.info(f"管理員 {identity.user_id} 已刪除部門 ID={department_id}")
