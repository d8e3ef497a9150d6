from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
import logging

from anonqa.errors import Forbidden, NotFound, ValidationFailed
from anonqa.models.department import Department
from anonqa.models.role import AppRole, UserRole
from anonqa.models.user import User
from anonqa.permissions import Action, Identity, Resource, authorize
from anonqa.schemas.user import Profile, PublicProfile
from anonqa.services.helpers import commit_or_conflict, get_or_404

logger = logging.getLogger(__name__)


def profile_view(user: User) -> Profile:
    return Profile(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        avatar_url=user.avatar_url,
        department_id=user.department_id,
        is_active=bool(user.is_active),
        created_at=user.created_at,
        roles=sorted(user.role_names, key=lambda r: r.value),
    )


def register_user(db: Session, email: str, password: str, full_name: Optional[str] = None) -> User:
    """建立用戶，同時給予不可移除的 employee 角色"""
    email = (email or "").strip().lower()
    if "@" not in email:
        raise ValidationFailed(detail="email 格式錯誤", reason="email_invalid")

    user = User(email=email, full_name=(full_name or "").strip() or None, is_active=True)
    user.set_password(password)
    user.roles.append(UserRole(role=AppRole.EMPLOYEE))
    db.add(user)
    commit_or_conflict(db, detail="email 已被註冊", reason="email_taken")
    db.refresh(user)
    logger.info(f"已註冊用戶 ID={user.id}")
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.email == (email or "").strip().lower()).first()
    if not user or not user.verify_password(password):
        return None
    if not user.is_active:
        return None
    return user


def get_public_profile(db: Session, identity: Identity, user_id: int) -> PublicProfile:
    authorize(identity, Resource.PUBLIC_PROFILE, Action.READ)
    # 只查詢公開欄位
    row = db.execute(
        select(User.id, User.full_name, User.avatar_url, User.department_id, User.created_at)
        .where(User.id == user_id)
    ).first()
    if row is None:
        raise NotFound(detail=f"用戶 {user_id} 不存在")
    return PublicProfile(**row._mapping)


def get_profile(db: Session, identity: Identity, user_id: int) -> Profile:
    authorize(identity, Resource.PROFILE, Action.READ, owner_id=user_id)
    user = get_or_404(db, User, user_id, detail=f"用戶 {user_id} 不存在")
    return profile_view(user)


def get_my_profile(db: Session, identity: Identity) -> Profile:
    return get_profile(db, identity, identity.user_id)


def update_my_profile(
    db: Session,
    identity: Identity,
    full_name: Optional[str] = None,
    avatar_url: Optional[str] = None,
    department_id: Optional[int] = None,
) -> Profile:
    authorize(identity, Resource.PROFILE, Action.UPDATE, owner_id=identity.user_id)
    user = get_or_404(db, User, identity.user_id)

    if full_name is not None:
        user.full_name = full_name.strip() or None
    if avatar_url is not None:
        user.avatar_url = avatar_url.strip() or None
    if department_id is not None:
        get_or_404(db, Department, department_id, detail=f"部門 {department_id} 不存在")
        user.department_id = department_id

    db.commit()
    db.refresh(user)
    return profile_view(user)


def list_users(db: Session, identity: Identity, search: Optional[str] = None) -> List[Profile]:
    authorize(identity, Resource.USER, Action.READ)
    query = db.query(User).options(selectinload(User.roles))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(User.email.ilike(pattern), User.full_name.ilike(pattern)))
    users = query.order_by(User.created_at.desc(), User.id.desc()).all()
    return [profile_view(user) for user in users]


def delete_user(db: Session, identity: Identity, user_id: int) -> None:
    """
    刪除用戶及其角色、投票、回答與部門管理員關聯

    用戶發布的問題與留言保留，但改為匿名，維持「無作者即匿名」的規則。
    投票透過 ORM 逐筆刪除，問題計數會一併調整。
    """
    authorize(identity, Resource.USER, Action.DELETE)
    if user_id == identity.user_id:
        raise Forbidden(detail="不能刪除自己的帳號", reason="cannot_delete_self")

    user = get_or_404(db, User, user_id, detail=f"用戶 {user_id} 不存在")

    for question in user.questions:
        question.is_anonymous = True
        question.author_id = None
    for comment in user.comments:
        comment.is_anonymous = True
        comment.author_id = None

    db.delete(user)
    db.commit()
    logger.info(f"管理員 {identity.user_id} 已刪除用戶 ID={user_id}")
