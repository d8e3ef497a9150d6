from pydantic import BaseModel
from typing import List
from anonqa.models.role import AppRole

class RoleAssign(BaseModel):
    role: AppRole

class UserRoles(BaseModel):
    user_id: int
    roles: List[AppRole]
