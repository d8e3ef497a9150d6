from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime
from anonqa.models.vote import VoteType

class VoteCast(BaseModel):
    vote_type: VoteType

class Vote(BaseModel):
    question_id: int
    vote_type: VoteType
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class VoteResult(BaseModel):
    """投票後的問題計數與自己的投票"""
    question_id: int
    vote: Optional[Vote] = None
    upvotes: int
    downvotes: int
