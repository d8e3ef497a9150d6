from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from anonqa.models.question import QuestionStatus, TITLE_MAX_LENGTH, CONTENT_MAX_LENGTH
from anonqa.models.vote import VoteType
from anonqa.schemas.answer import Answer
from anonqa.schemas.user import PublicProfile

class QuestionBase(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)
    department_id: Optional[int] = None

class QuestionCreate(QuestionBase):
    is_anonymous: bool = True
    # 未提供時由伺服器依匿名設定填入
    author_id: Optional[int] = None

class QuestionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: Optional[str] = Field(default=None, min_length=1, max_length=CONTENT_MAX_LENGTH)
    department_id: Optional[int] = None
    status: Optional[QuestionStatus] = None

class QuestionStatusUpdate(BaseModel):
    status: QuestionStatus

class Question(QuestionBase):
    id: int
    department_name: Optional[str] = None
    is_anonymous: bool
    author_id: Optional[int] = None
    status: QuestionStatus
    upvotes: int
    downvotes: int
    score: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[PublicProfile] = None
    my_vote: Optional[VoteType] = None

    model_config = ConfigDict(from_attributes=True)

class QuestionDetail(Question):
    answers: List[Answer] = []
