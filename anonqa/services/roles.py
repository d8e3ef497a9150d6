from sqlalchemy.orm import Session
from typing import List
import logging

from anonqa.errors import ConflictFailed, NotFound, ValidationFailed
from anonqa.models.department import Department, DepartmentAdmin
from anonqa.models.role import AppRole, UserRole
from anonqa.models.user import User
from anonqa.permissions import Action, Identity, Resource, authorize
from anonqa.services.helpers import commit_or_conflict, get_or_404

logger = logging.getLogger(__name__)


def list_user_roles(db: Session, identity: Identity, user_id: int) -> List[AppRole]:
    authorize(identity, Resource.ROLE, Action.READ, owner_id=user_id)
    user = get_or_404(db, User, user_id, detail=f"用戶 {user_id} 不存在")
    return sorted(user.role_names, key=lambda r: r.value)


def assign_role(db: Session, identity: Identity, user_id: int, role: AppRole) -> List[AppRole]:
    authorize(identity, Resource.ROLE, Action.CREATE)
    user = get_or_404(db, User, user_id, detail=f"用戶 {user_id} 不存在")
    if user.has_role(role):
        raise ConflictFailed(detail=f"用戶已具備 {role.value} 角色", reason="role_exists")

    db.add(UserRole(user_id=user.id, role=role))
    commit_or_conflict(db, detail=f"用戶已具備 {role.value} 角色", reason="role_exists")
    db.refresh(user)
    logger.info(f"管理員 {identity.user_id} 為用戶 {user_id} 新增角色 {role.value}")
    return sorted(user.role_names, key=lambda r: r.value)


def remove_role(db: Session, identity: Identity, user_id: int, role: AppRole) -> List[AppRole]:
    authorize(identity, Resource.ROLE, Action.DELETE)
    if role == AppRole.EMPLOYEE:
        raise ValidationFailed(detail="employee 角色不可移除", reason="employee_role_required")

    user = get_or_404(db, User, user_id, detail=f"用戶 {user_id} 不存在")
    row = next((r for r in user.roles if r.role == role), None)
    if row is None:
        raise NotFound(detail=f"用戶沒有 {role.value} 角色", reason="role_not_found")

    user.roles.remove(row)
    db.commit()
    db.refresh(user)
    logger.info(f"管理員 {identity.user_id} 移除用戶 {user_id} 的角色 {role.value}")
    return sorted(user.role_names, key=lambda r: r.value)


def list_department_admins(db: Session, identity: Identity, department_id: int) -> List[DepartmentAdmin]:
    authorize(identity, Resource.DEPARTMENT_ADMIN, Action.READ)
    get_or_404(db, Department, department_id, detail=f"部門 {department_id} 不存在")
    return (
        db.query(DepartmentAdmin)
        .filter(DepartmentAdmin.department_id == department_id)
        .order_by(DepartmentAdmin.created_at, DepartmentAdmin.id)
        .all()
    )


def assign_department_admin(db: Session, identity: Identity, department_id: int, user_id: int) -> DepartmentAdmin:
    """
    指派部門管理員

    部門管理員需要回答問題，若用戶尚未具備 responder 角色則一併給予。
    """
    authorize(identity, Resource.DEPARTMENT_ADMIN, Action.CREATE)
    get_or_404(db, Department, department_id, detail=f"部門 {department_id} 不存在")
    user = get_or_404(db, User, user_id, detail=f"用戶 {user_id} 不存在")

    existing = db.query(DepartmentAdmin).filter(
        DepartmentAdmin.department_id == department_id,
        DepartmentAdmin.user_id == user_id
    ).first()
    if existing:
        raise ConflictFailed(detail="該用戶已是此部門管理員", reason="department_admin_exists")

    link = DepartmentAdmin(department_id=department_id, user_id=user_id)
    db.add(link)
    if not user.has_role(AppRole.RESPONDER):
        db.add(UserRole(user_id=user_id, role=AppRole.RESPONDER))
        logger.info(f"用戶 {user_id} 成為部門管理員，自動給予 responder 角色")

    commit_or_conflict(db, detail="該用戶已是此部門管理員", reason="department_admin_exists")
    db.refresh(link)
    logger.info(f"管理員 {identity.user_id} 指派用戶 {user_id} 為部門 {department_id} 管理員")
    return link


def remove_department_admin(db: Session, identity: Identity, department_id: int, user_id: int) -> None:
    authorize(identity, Resource.DEPARTMENT_ADMIN, Action.DELETE)
    link = db.query(DepartmentAdmin).filter(
        DepartmentAdmin.department_id == department_id,
        DepartmentAdmin.user_id == user_id
    ).first()
    if link is None:
        raise NotFound(detail="該用戶不是此部門管理員", reason="department_admin_not_found")

    db.delete(link)
    db.commit()
    logger.info(f"管理員 {identity.user_id} 移除部門 {department_id} 的管理員 {user_id}")
