import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient
import os

from anonqa.database import Base, get_db
from anonqa.dependencies import create_access_token, get_email_transport
from anonqa.models import user, role, department, question, answer, comment, vote  # 預加載所有模型
from anonqa.models.department import Department, DepartmentAdmin
from anonqa.models.role import AppRole, UserRole
from anonqa.models.user import User
from anonqa.permissions import Identity
from main import app

# 使用獨立的測試資料庫
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_anonqa.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def cleanup_database():
    yield
    engine.dispose()  # 重要：關閉所有連接以釋放文件
    if os.path.exists("./test_anonqa.db"):
        try:
            os.remove("./test_anonqa.db")
        except PermissionError:
            pass


@pytest.fixture
def db_session():
    # 每個測試使用全新的資料表
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db_session):
    return TestingSessionLocal


@pytest.fixture
def other_session(db_session):
    """模擬同一用戶的另一個請求"""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_transport] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """建立用戶，預設只有 employee 角色"""
    counter = {"n": 0}

    def _make_user(full_name=None, roles=(), email=None, password="password123", department_id=None):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            full_name=full_name,
            is_active=True,
            department_id=department_id
        )
        user.set_password(password)
        user.roles.append(UserRole(role=AppRole.EMPLOYEE))
        for r in roles:
            user.roles.append(UserRole(role=r))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_department(db_session):
    def _make_department(name, admins=()):
        dept = Department(name=name)
        db_session.add(dept)
        db_session.flush()
        for admin in admins:
            db_session.add(DepartmentAdmin(department_id=dept.id, user_id=admin.id))
        db_session.commit()
        db_session.refresh(dept)
        return dept

    return _make_department


@pytest.fixture
def identity_of():
    def _identity_of(user):
        return Identity(user_id=user.id, roles=frozenset(user.role_names))

    return _identity_of


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(data={"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
