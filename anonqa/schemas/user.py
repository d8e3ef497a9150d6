from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from anonqa.models.role import AppRole

class UserRegister(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8)
    full_name: Optional[str] = Field(default=None, max_length=200)

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class PublicProfile(BaseModel):
    """顯示作者用的公開資料，不含 email"""
    id: int
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    department_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

class Profile(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    department_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    roles: List[AppRole] = []

    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=200)
    avatar_url: Optional[str] = Field(default=None, max_length=2000)
    department_id: Optional[int] = None
