from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

class NotificationRequest(BaseModel):
    question_id: int = Field(validation_alias="questionId")

    model_config = ConfigDict(populate_by_name=True)

class RecipientResult(BaseModel):
    user_id: int
    success: bool
    error: Optional[str] = None

class NotificationSummary(BaseModel):
    message: str
    success_count: int = Field(default=0, serialization_alias="successCount")
    total: int = 0
    results: List[RecipientResult] = []

    model_config = ConfigDict(populate_by_name=True)
