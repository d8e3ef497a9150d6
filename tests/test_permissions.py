import pytest
from anonqa.errors import Forbidden, Unauthenticated
from anonqa.models.role import AppRole
from anonqa.permissions import Action, Identity, Resource, authorize, is_allowed

EMPLOYEE = Identity(user_id=1, roles=frozenset({AppRole.EMPLOYEE}))
RESPONDER = Identity(user_id=2, roles=frozenset({AppRole.EMPLOYEE, AppRole.RESPONDER}))
ADMIN = Identity(user_id=3, roles=frozenset({AppRole.EMPLOYEE, AppRole.ADMIN}))


def test_anyone_can_read_content():
    for resource in (Resource.QUESTION, Resource.ANSWER, Resource.COMMENT, Resource.DEPARTMENT, Resource.PUBLIC_PROFILE):
        assert is_allowed(EMPLOYEE, resource, Action.READ)


def test_no_identity_is_never_allowed():
    assert not is_allowed(None, Resource.QUESTION, Action.READ)
    with pytest.raises(Unauthenticated):
        authorize(None, Resource.QUESTION, Action.READ)


def test_anonymous_question_must_not_record_author():
    assert is_allowed(EMPLOYEE, Resource.QUESTION, Action.CREATE, owner_id=None, anonymous=True)
    assert not is_allowed(EMPLOYEE, Resource.QUESTION, Action.CREATE, owner_id=EMPLOYEE.user_id, anonymous=True)


def test_named_question_author_must_be_caller():
    assert is_allowed(EMPLOYEE, Resource.QUESTION, Action.CREATE, owner_id=EMPLOYEE.user_id)
    assert not is_allowed(EMPLOYEE, Resource.QUESTION, Action.CREATE, owner_id=RESPONDER.user_id)
    assert not is_allowed(EMPLOYEE, Resource.QUESTION, Action.CREATE, owner_id=None)


def test_question_update_and_delete_admin_only():
    for action in (Action.UPDATE, Action.DELETE):
        assert is_allowed(ADMIN, Resource.QUESTION, action)
        assert not is_allowed(RESPONDER, Resource.QUESTION, action)
        assert not is_allowed(EMPLOYEE, Resource.QUESTION, action)


def test_answer_create_requires_responder_role():
    assert is_allowed(RESPONDER, Resource.ANSWER, Action.CREATE, owner_id=RESPONDER.user_id)
    assert is_allowed(ADMIN, Resource.ANSWER, Action.CREATE, owner_id=ADMIN.user_id)
    assert not is_allowed(EMPLOYEE, Resource.ANSWER, Action.CREATE, owner_id=EMPLOYEE.user_id)
    # 不能以他人名義回答
    assert not is_allowed(RESPONDER, Resource.ANSWER, Action.CREATE, owner_id=ADMIN.user_id)


def test_answer_update_owner_or_admin():
    assert is_allowed(RESPONDER, Resource.ANSWER, Action.UPDATE, owner_id=RESPONDER.user_id)
    assert is_allowed(ADMIN, Resource.ANSWER, Action.UPDATE, owner_id=RESPONDER.user_id)
    assert not is_allowed(EMPLOYEE, Resource.ANSWER, Action.DELETE, owner_id=RESPONDER.user_id)


def test_comment_delete_admin_only():
    assert is_allowed(ADMIN, Resource.COMMENT, Action.DELETE)
    assert not is_allowed(EMPLOYEE, Resource.COMMENT, Action.DELETE, owner_id=EMPLOYEE.user_id)


def test_votes_are_private_to_owner():
    for action in (Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE):
        assert is_allowed(EMPLOYEE, Resource.VOTE, action, owner_id=EMPLOYEE.user_id)
        assert not is_allowed(ADMIN, Resource.VOTE, action, owner_id=EMPLOYEE.user_id)


def test_full_profile_owner_or_admin():
    assert is_allowed(EMPLOYEE, Resource.PROFILE, Action.READ, owner_id=EMPLOYEE.user_id)
    assert is_allowed(ADMIN, Resource.PROFILE, Action.READ, owner_id=EMPLOYEE.user_id)
    assert not is_allowed(RESPONDER, Resource.PROFILE, Action.READ, owner_id=EMPLOYEE.user_id)


def test_role_and_department_management_admin_only():
    for resource in (Resource.ROLE, Resource.DEPARTMENT_ADMIN):
        assert is_allowed(ADMIN, resource, Action.CREATE)
        assert not is_allowed(RESPONDER, resource, Action.CREATE)
    assert not is_allowed(EMPLOYEE, Resource.DEPARTMENT, Action.CREATE)


def test_unknown_pair_is_denied():
    assert not is_allowed(ADMIN, Resource.PUBLIC_PROFILE, Action.DELETE)


def test_authorize_raises_forbidden_with_reason():
    with pytest.raises(Forbidden) as exc:
        authorize(EMPLOYEE, Resource.QUESTION, Action.DELETE)
    assert exc.value.status_code == 403
    assert exc.value.reason == "question_delete_forbidden"
    assert authorize(ADMIN, Resource.QUESTION, Action.DELETE) is ADMIN
