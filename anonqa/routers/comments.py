from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from anonqa.database import get_db
from anonqa.dependencies import get_current_identity
from anonqa.permissions import Identity
from anonqa.services import questions as question_service

router = APIRouter()


@router.delete("/{comment_id}", status_code=204)
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    question_service.delete_comment(db, identity, comment_id)
