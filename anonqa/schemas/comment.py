from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from anonqa.models.comment import CONTENT_MAX_LENGTH
from anonqa.schemas.user import PublicProfile

class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)
    is_anonymous: bool = True

class Comment(BaseModel):
    id: int
    answer_id: int
    content: str
    is_anonymous: bool
    author_id: Optional[int] = None
    created_at: Optional[datetime] = None
    author: Optional[PublicProfile] = None

    model_config = ConfigDict(from_attributes=True)
