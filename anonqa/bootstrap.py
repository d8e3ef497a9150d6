from sqlalchemy.orm import Session
import logging
import secrets

from anonqa.config import settings
from anonqa.models.department import Department
from anonqa.models.role import AppRole, UserRole
from anonqa.models.user import User

logger = logging.getLogger(__name__)


def seed_departments(db: Session) -> int:
    """建立預設部門，已存在的名稱略過"""
    existing = {name for (name,) in db.query(Department.name).all()}
    created = 0
    for name, description in settings.DEFAULT_DEPARTMENTS:
        if name in existing:
            continue
        db.add(Department(name=name, description=description))
        created += 1
    if created:
        db.commit()
        logger.info(f"已建立 {created} 個預設部門")
    return created


def create_admin_user(db: Session) -> User:
    """建立初始管理員，並確保具備 employee 與 admin 角色"""
    admin = db.query(User).filter(User.email == settings.ADMIN_EMAIL).first()
    if not admin:
        admin = User(email=settings.ADMIN_EMAIL, full_name="Administrator", is_active=True)
        # 使用環境變數設定管理員密碼，禁止硬編碼
        admin_password = settings.ADMIN_PASSWORD
        if not admin_password:
            logger.warning('環境變數 QA_ADMIN_PASSWORD 未設定，請設定後重新啟動')
            admin_password = secrets.token_urlsafe(16)
            logger.warning(f'已產生臨時隨機密碼（僅顯示一次）: {admin_password}')
        admin.set_password(admin_password)
        db.add(admin)
        db.commit()
        logger.info("已創建管理員用戶")

    for role in (AppRole.EMPLOYEE, AppRole.ADMIN):
        if not admin.has_role(role):
            admin.roles.append(UserRole(role=role))
            logger.info(f"已為管理員分配角色 {role.value}")
    db.commit()
    return admin


def bootstrap(db: Session) -> None:
    if settings.SEED_DEPARTMENTS:
        seed_departments(db)
    create_admin_user(db)
