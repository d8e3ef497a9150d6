from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from anonqa.database import Base
from anonqa.models.role import AppRole
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    password_hash = Column(String)
    is_active = Column(Boolean, default=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    department = relationship("Department", back_populates="members")

    # 角色，刪除用戶時一併刪除
    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan")

    # 負責的部門
    admin_links = relationship("DepartmentAdmin", back_populates="user", cascade="all, delete-orphan")

    # 其他關係
    questions = relationship("Question", back_populates="author")
    answers = relationship("Answer", back_populates="author", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="author")
    votes = relationship("Vote", back_populates="user", cascade="all, delete-orphan")

    @property
    def role_names(self):
        return {r.role for r in self.roles}

    def has_role(self, role: AppRole) -> bool:
        return role in self.role_names

    @property
    def display_name(self):
        return self.full_name or self.email

    def set_password(self, password):
        self.password_hash = pwd_context.hash(password)

    def verify_password(self, password):
        if not self.password_hash:
            return False
        return pwd_context.verify(password, self.password_hash)
