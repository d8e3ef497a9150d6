from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from anonqa.models.answer import CONTENT_MAX_LENGTH
from anonqa.schemas.comment import Comment
from anonqa.schemas.user import PublicProfile

class AnswerCreate(BaseModel):
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)

class AnswerUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)

class Answer(BaseModel):
    id: int
    question_id: int
    content: str
    author_id: int
    is_official: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[PublicProfile] = None
    comments: List[Comment] = []

    model_config = ConfigDict(from_attributes=True)
