from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from anonqa.database import Base

class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # 部門管理員，刪除部門時一併刪除
    admins = relationship("DepartmentAdmin", back_populates="department", cascade="all, delete-orphan")

    # 問題與用戶在部門刪除後保留，部門欄位設為空
    questions = relationship("Question", back_populates="department")
    members = relationship("User", back_populates="department")


class DepartmentAdmin(Base):
    """部門管理員：負責回答該部門問題並接收新問題通知"""

    __tablename__ = "department_admins"
    __table_args__ = (
        UniqueConstraint("user_id", "department_id", name="uq_department_admins_user_department"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="admin_links")
    department = relationship("Department", back_populates="admins")
