from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class DepartmentBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None

class DepartmentCreate(DepartmentBase):
    pass

class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None

class Department(DepartmentBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class DepartmentAdminAssign(BaseModel):
    user_id: int

class DepartmentAdmin(BaseModel):
    id: int
    user_id: int
    department_id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
