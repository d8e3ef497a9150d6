from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from anonqa.config import settings
from anonqa.database import get_db
from anonqa.dependencies import get_current_identity, get_email_transport, get_optional_identity
from anonqa.models.question import QuestionStatus
from anonqa.permissions import Identity
from anonqa.schemas.answer import Answer, AnswerCreate
from anonqa.schemas.question import Question, QuestionCreate, QuestionDetail, QuestionStatusUpdate, QuestionUpdate
from anonqa.schemas.vote import VoteCast, VoteResult
from anonqa.services import questions as question_service
from anonqa.services import votes as vote_service
from anonqa.services.email import EmailTransport
from anonqa.services.notifications import notify_in_background

router = APIRouter()

logger = logging.getLogger(__name__)


@router.get("/", response_model=List[Question])
def list_questions(
    department_id: Optional[int] = None,
    status: Optional[QuestionStatus] = None,
    search: Optional[str] = None,
    sort: str = Query("newest"),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity)
):
    return question_service.list_questions(
        db, identity, department_id=department_id, status=status, search=search, sort=sort
    )


@router.post("/", response_model=Question, status_code=201)
def create_question(
    data: QuestionCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    transport: Optional[EmailTransport] = Depends(get_email_transport)
):
    kwargs = {}
    # 只有明確傳入 author_id 時才交由權限規則檢查
    if "author_id" in data.model_fields_set:
        kwargs["author_id"] = data.author_id
    question = question_service.create_question(
        db,
        identity,
        title=data.title,
        content=data.content,
        department_id=data.department_id,
        is_anonymous=data.is_anonymous,
        **kwargs
    )

    if question.department_id is not None and transport is not None and settings.NOTIFY_ON_CREATE:
        background_tasks.add_task(notify_in_background, question.id, transport)
        logger.info(f"已排程問題 {question.id} 的部門管理員通知")

    return question_service.question_view(question)


@router.get("/{question_id}", response_model=QuestionDetail)
def get_question(
    question_id: int,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity)
):
    return question_service.get_question(db, identity, question_id)


@router.put("/{question_id}", response_model=Question)
def update_question(
    question_id: int,
    data: QuestionUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    kwargs = {}
    if "department_id" in data.model_fields_set:
        kwargs["department_id"] = data.department_id
    question = question_service.update_question(
        db, identity, question_id, title=data.title, content=data.content, status=data.status, **kwargs
    )
    return question_service.question_view(question)


@router.put("/{question_id}/status", response_model=Question)
def set_status(
    question_id: int,
    data: QuestionStatusUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    question = question_service.set_question_status(db, identity, question_id, data.status)
    return question_service.question_view(question)


@router.delete("/{question_id}", status_code=204)
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    question_service.delete_question(db, identity, question_id)


@router.post("/{question_id}/answers", response_model=Answer, status_code=201)
def create_answer(
    question_id: int,
    data: AnswerCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return question_service.create_answer(db, identity, question_id, data.content)


# 投票
@router.post("/{question_id}/votes", response_model=VoteResult, status_code=201)
def cast_vote(
    question_id: int,
    data: VoteCast,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return vote_service.cast_vote(db, identity, question_id, data.vote_type)


@router.put("/{question_id}/votes", response_model=VoteResult)
def change_vote(
    question_id: int,
    data: VoteCast,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return vote_service.change_vote(db, identity, question_id, data.vote_type)


@router.delete("/{question_id}/votes", response_model=VoteResult)
def retract_vote(
    question_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return vote_service.retract_vote(db, identity, question_id)


@router.post("/{question_id}/votes/toggle", response_model=VoteResult)
def toggle_vote(
    question_id: int,
    data: VoteCast,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    return vote_service.toggle_vote(db, identity, question_id, data.vote_type)
