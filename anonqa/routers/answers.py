from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from anonqa.database import get_db
from anonqa.dependencies import get_current_identity
from anonqa.permissions import Identity
from anonqa.schemas.answer import Answer, AnswerUpdate
from anonqa.schemas.comment import Comment, CommentCreate
from anonqa.services import questions as question_service

router = APIRouter()


@router.put("/{answer_id}", response_model=Answer)
def update_answer(
    answer_id: int,
    data: AnswerUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return question_service.update_answer(db, identity, answer_id, data.content)


@router.delete("/{answer_id}", status_code=204)
def delete_answer(
    answer_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    question_service.delete_answer(db, identity, answer_id)


@router.post("/{answer_id}/comments", response_model=Comment, status_code=201)
def create_comment(
    answer_id: int,
    data: CommentCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    comment = question_service.create_comment(db, identity, answer_id, data.content, is_anonymous=data.is_anonymous)
    return Comment.model_validate(comment)
