from sqlalchemy import Column, Integer, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from anonqa.database import Base
import enum

class AppRole(str, enum.Enum):
    EMPLOYEE = "employee"  # 一般員工，註冊時自動給予且不可移除
    RESPONDER = "responder"  # 可發布官方回答
    ADMIN = "admin"  # 系統管理員

class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(
        Enum(AppRole, name="app_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )

    user = relationship("User", back_populates="roles")
