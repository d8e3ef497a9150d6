"""
權限判斷

每個服務操作在存取資料前都會以 (身分, 資源, 動作, 擁有者) 呼叫 is_allowed，
規則集中在 RULES 表中，不依賴資料庫即可測試。
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Optional, Tuple
import enum

from anonqa.errors import Forbidden, Unauthenticated
from anonqa.models.role import AppRole


@dataclass(frozen=True)
class Identity:
    """單一請求內的使用者身分，由依賴項建立後明確傳入各服務函數"""

    user_id: int
    roles: FrozenSet[AppRole] = field(default_factory=frozenset)

    def has_role(self, role: AppRole) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return AppRole.ADMIN in self.roles

    @property
    def is_responder(self) -> bool:
        # admin 也具備回答權限
        return AppRole.RESPONDER in self.roles or AppRole.ADMIN in self.roles


class Resource(str, enum.Enum):
    QUESTION = "question"
    ANSWER = "answer"
    COMMENT = "comment"
    VOTE = "vote"
    DEPARTMENT = "department"
    DEPARTMENT_ADMIN = "department_admin"
    PROFILE = "profile"
    PUBLIC_PROFILE = "public_profile"
    ROLE = "role"
    USER = "user"


class Action(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


Rule = Callable[[Identity, Optional[int], bool], bool]


def _anyone(identity, owner_id, anonymous):
    return True


def _admin(identity, owner_id, anonymous):
    return identity.is_admin


def _owner(identity, owner_id, anonymous):
    return owner_id is not None and owner_id == identity.user_id


def _owner_or_admin(identity, owner_id, anonymous):
    return _owner(identity, owner_id, anonymous) or identity.is_admin


def _question_author(identity, owner_id, anonymous):
    # 匿名問題不得記錄作者，具名問題作者必須是自己
    if anonymous:
        return owner_id is None
    return _owner(identity, owner_id, anonymous)


def _answer_author(identity, owner_id, anonymous):
    return identity.is_responder and _owner(identity, owner_id, anonymous)


def _comment_author(identity, owner_id, anonymous):
    if anonymous:
        return owner_id is None or owner_id == identity.user_id
    return _owner(identity, owner_id, anonymous)


RULES: Dict[Tuple[Resource, Action], Rule] = {
    (Resource.QUESTION, Action.READ): _anyone,
    (Resource.QUESTION, Action.CREATE): _question_author,
    (Resource.QUESTION, Action.UPDATE): _admin,
    (Resource.QUESTION, Action.DELETE): _admin,

    (Resource.ANSWER, Action.READ): _anyone,
    (Resource.ANSWER, Action.CREATE): _answer_author,
    (Resource.ANSWER, Action.UPDATE): _owner_or_admin,
    (Resource.ANSWER, Action.DELETE): _owner_or_admin,

    (Resource.COMMENT, Action.READ): _anyone,
    (Resource.COMMENT, Action.CREATE): _comment_author,
    (Resource.COMMENT, Action.UPDATE): _admin,
    (Resource.COMMENT, Action.DELETE): _admin,

    # 投票只能看到與操作自己的紀錄
    (Resource.VOTE, Action.READ): _owner,
    (Resource.VOTE, Action.CREATE): _owner,
    (Resource.VOTE, Action.UPDATE): _owner,
    (Resource.VOTE, Action.DELETE): _owner,

    (Resource.DEPARTMENT, Action.READ): _anyone,
    (Resource.DEPARTMENT, Action.CREATE): _admin,
    (Resource.DEPARTMENT, Action.UPDATE): _admin,
    (Resource.DEPARTMENT, Action.DELETE): _admin,

    (Resource.DEPARTMENT_ADMIN, Action.READ): _admin,
    (Resource.DEPARTMENT_ADMIN, Action.CREATE): _admin,
    (Resource.DEPARTMENT_ADMIN, Action.UPDATE): _admin,
    (Resource.DEPARTMENT_ADMIN, Action.DELETE): _admin,

    # 完整個人資料含 email，只有本人與管理員可讀
    (Resource.PROFILE, Action.READ): _owner_or_admin,
    (Resource.PROFILE, Action.UPDATE): _owner,

    (Resource.PUBLIC_PROFILE, Action.READ): _anyone,

    (Resource.ROLE, Action.READ): _owner_or_admin,
    (Resource.ROLE, Action.CREATE): _admin,
    (Resource.ROLE, Action.DELETE): _admin,

    (Resource.USER, Action.READ): _admin,
    (Resource.USER, Action.DELETE): _admin,
}


def is_allowed(
    identity: Optional[Identity],
    resource: Resource,
    action: Action,
    owner_id: Optional[int] = None,
    anonymous: bool = False,
) -> bool:
    """
    檢查身分是否可以對資源執行動作

    Args:
        identity: 目前請求的身分，未登入為 None
        resource: 資源類型
        action: 動作
        owner_id: 資料列記錄的擁有者（作者、投票者等），新增時為欲寫入的值
        anonymous: 資料列是否為匿名

    Returns:
        bool: 是否允許
    """
    if identity is None:
        return False
    rule = RULES.get((resource, action))
    if rule is None:
        return False
    return rule(identity, owner_id, anonymous)


def authorize(
    identity: Optional[Identity],
    resource: Resource,
    action: Action,
    owner_id: Optional[int] = None,
    anonymous: bool = False,
) -> Identity:
    """同 is_allowed，但拒絕時拋出 Unauthenticated 或 Forbidden"""
    if identity is None:
        raise Unauthenticated()
    if not is_allowed(identity, resource, action, owner_id=owner_id, anonymous=anonymous):
        raise Forbidden(
            detail=f"無權限執行此操作: {action.value} {resource.value}",
            reason=f"{resource.value}_{action.value}_forbidden",
        )
    return identity
