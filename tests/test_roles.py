import pytest
from anonqa.errors import ConflictFailed, Forbidden, NotFound, ValidationFailed
from anonqa.models.department import DepartmentAdmin
from anonqa.models.role import AppRole
from anonqa.services import departments as department_service
from anonqa.services import roles as role_service
from anonqa.services import users as user_service


@pytest.fixture
def admin(make_user):
    return make_user(full_name="Admin", roles=[AppRole.ADMIN])


def test_register_grants_employee_role(db_session):
    user = user_service.register_user(db_session, "New@Example.com", "password123", "New User")
    assert user.email == "new@example.com"
    assert user.role_names == {AppRole.EMPLOYEE}


def test_register_duplicate_email_conflict(db_session):
    user_service.register_user(db_session, "dup@example.com", "password123")
    with pytest.raises(ConflictFailed) as exc:
        user_service.register_user(db_session, "dup@example.com", "password123")
    assert exc.value.reason == "email_taken"


def test_assign_and_remove_role(db_session, admin, make_user, identity_of):
    user = make_user()
    roles = role_service.assign_role(db_session, identity_of(admin), user.id, AppRole.RESPONDER)
    assert roles == [AppRole.EMPLOYEE, AppRole.RESPONDER]

    with pytest.raises(ConflictFailed):
        role_service.assign_role(db_session, identity_of(admin), user.id, AppRole.RESPONDER)

    roles = role_service.remove_role(db_session, identity_of(admin), user.id, AppRole.RESPONDER)
    assert roles == [AppRole.EMPLOYEE]

    with pytest.raises(NotFound):
        role_service.remove_role(db_session, identity_of(admin), user.id, AppRole.RESPONDER)


def test_employee_role_cannot_be_removed(db_session, admin, make_user, identity_of):
    user = make_user()
    with pytest.raises(ValidationFailed):
        role_service.remove_role(db_session, identity_of(admin), user.id, AppRole.EMPLOYEE)
    assert role_service.list_user_roles(db_session, identity_of(user), user.id) == [AppRole.EMPLOYEE]


def test_non_admin_cannot_assign_roles(db_session, make_user, identity_of):
    user = make_user(roles=[AppRole.RESPONDER])
    with pytest.raises(Forbidden):
        role_service.assign_role(db_session, identity_of(user), user.id, AppRole.ADMIN)


def test_department_admin_gets_responder(db_session, admin, make_user, make_department, identity_of):
    dept = make_department("Finance")
    user = make_user()

    link = role_service.assign_department_admin(db_session, identity_of(admin), dept.id, user.id)
    assert link.department_id == dept.id
    db_session.refresh(user)
    assert user.has_role(AppRole.RESPONDER)

    with pytest.raises(ConflictFailed):
        role_service.assign_department_admin(db_session, identity_of(admin), dept.id, user.id)

    admins = role_service.list_department_admins(db_session, identity_of(admin), dept.id)
    assert [a.user_id for a in admins] == [user.id]


def test_department_admin_keeps_existing_responder(db_session, admin, make_user, make_department, identity_of):
    dept = make_department("Product")
    user = make_user(roles=[AppRole.RESPONDER])
    role_service.assign_department_admin(db_session, identity_of(admin), dept.id, user.id)
    db_session.refresh(user)
    assert sorted(r.value for r in user.role_names) == ["employee", "responder"]


def test_remove_department_admin(db_session, admin, make_user, make_department, identity_of):
    user = make_user()
    dept = make_department("HR", admins=[user])
    role_service.remove_department_admin(db_session, identity_of(admin), dept.id, user.id)
    assert db_session.query(DepartmentAdmin).count() == 0
    with pytest.raises(NotFound):
        role_service.remove_department_admin(db_session, identity_of(admin), dept.id, user.id)


def test_department_crud(db_session, admin, make_user, identity_of):
    identity = identity_of(admin)
    dept = department_service.create_department(db_session, identity, "Legal", "Contracts")
    with pytest.raises(ConflictFailed):
        department_service.create_department(db_session, identity, "Legal")

    updated = department_service.update_department(db_session, identity, dept.id, name="Legal & Compliance")
    assert updated.name == "Legal & Compliance"

    names = [d.name for d in department_service.list_departments(db_session, identity_of(make_user()))]
    assert names == ["Legal & Compliance"]

    department_service.delete_department(db_session, identity, dept.id)
    assert department_service.list_departments(db_session, identity) == []


def test_employee_cannot_create_department(db_session, make_user, identity_of):
    with pytest.raises(Forbidden):
        department_service.create_department(db_session, identity_of(make_user()), "Sales")


def test_public_profile_has_no_email(db_session, make_user, identity_of):
    user = make_user(full_name="Carol")
    profile = user_service.get_public_profile(db_session, identity_of(make_user()), user.id)
    assert profile.full_name == "Carol"
    assert "email" not in profile.model_dump()


def test_full_profile_owner_or_admin(db_session, admin, make_user, identity_of):
    user, other = make_user(), make_user()
    assert user_service.get_profile(db_session, identity_of(user), user.id).email == user.email
    assert user_service.get_profile(db_session, identity_of(admin), user.id).email == user.email
    with pytest.raises(Forbidden):
        user_service.get_profile(db_session, identity_of(other), user.id)


def test_admin_cannot_delete_self(db_session, admin, identity_of):
    with pytest.raises(Forbidden) as exc:
        user_service.delete_user(db_session, identity_of(admin), admin.id)
    assert exc.value.reason == "cannot_delete_self"


def test_list_users_search(db_session, admin, make_user, identity_of):
    make_user(full_name="Dora Explorer")
    make_user(full_name="Eve")
    result = user_service.list_users(db_session, identity_of(admin), search="dora")
    assert [u.full_name for u in result] == ["Dora Explorer"]
