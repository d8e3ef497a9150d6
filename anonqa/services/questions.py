from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload
from typing import Dict, List, Optional
import logging

from anonqa.errors import NotFound, ValidationFailed
from anonqa.models.answer import Answer, CONTENT_MAX_LENGTH as ANSWER_MAX_LENGTH
from anonqa.models.comment import Comment, CONTENT_MAX_LENGTH as COMMENT_MAX_LENGTH
from anonqa.models.department import Department
from anonqa.models.question import Question, QuestionStatus, TITLE_MAX_LENGTH, CONTENT_MAX_LENGTH
from anonqa.models.vote import Vote
from anonqa.permissions import Action, Identity, Resource, authorize
from anonqa.schemas.answer import Answer as AnswerSchema
from anonqa.schemas.question import Question as QuestionSchema, QuestionDetail
from anonqa.schemas.user import PublicProfile
from anonqa.services.helpers import clean_text, get_or_404

logger = logging.getLogger(__name__)

_UNSET = object()

SORT_OPTIONS = ("newest", "oldest", "popular")


def _public_author(user) -> Optional[PublicProfile]:
    if user is None:
        return None
    return PublicProfile.model_validate(user)


def question_view(question: Question, my_vote=None) -> QuestionSchema:
    return QuestionSchema(
        id=question.id,
        title=question.title,
        content=question.content,
        department_id=question.department_id,
        department_name=question.department.name if question.department else None,
        is_anonymous=question.is_anonymous,
        author_id=question.author_id,
        status=question.status,
        upvotes=question.upvotes,
        downvotes=question.downvotes,
        score=question.score,
        created_at=question.created_at,
        updated_at=question.updated_at,
        # 匿名問題不顯示作者
        author=None if question.is_anonymous else _public_author(question.author),
        my_vote=my_vote,
    )


def _my_votes(db: Session, identity: Identity, question_ids: List[int]) -> Dict[int, object]:
    if not question_ids:
        return {}
    rows = db.query(Vote.question_id, Vote.vote_type).filter(
        Vote.user_id == identity.user_id,
        Vote.question_id.in_(question_ids)
    ).all()
    return {question_id: vote_type for question_id, vote_type in rows}


def create_question(
    db: Session,
    identity: Identity,
    title: str,
    content: str,
    department_id: Optional[int] = None,
    is_anonymous: bool = True,
    author_id=_UNSET,
) -> Question:
    """
    建立問題

    author_id 未指定時依匿名設定填入（匿名為 None，否則為目前用戶）；
    若明確指定則必須符合權限規則。
    """
    if author_id is _UNSET:
        author_id = None if is_anonymous else identity.user_id
    authorize(identity, Resource.QUESTION, Action.CREATE, owner_id=author_id, anonymous=is_anonymous)

    title = clean_text(title, "title", TITLE_MAX_LENGTH)
    content = clean_text(content, "content", CONTENT_MAX_LENGTH)
    if department_id is not None:
        get_or_404(db, Department, department_id, detail=f"部門 {department_id} 不存在")

    question = Question(
        title=title,
        content=content,
        department_id=department_id,
        is_anonymous=is_anonymous,
        author_id=author_id,
        status=QuestionStatus.OPEN,
        upvotes=0,
        downvotes=0,
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    logger.info(f"已創建問題 ID={question.id}, 部門={department_id}, 匿名={is_anonymous}")
    return question


def list_questions(
    db: Session,
    identity: Identity,
    department_id: Optional[int] = None,
    status: Optional[QuestionStatus] = None,
    search: Optional[str] = None,
    sort: str = "newest",
) -> List[QuestionSchema]:
    authorize(identity, Resource.QUESTION, Action.READ)
    if sort not in SORT_OPTIONS:
        raise ValidationFailed(detail=f"不支援的排序方式: {sort}", reason="sort_invalid")

    query = db.query(Question).options(
        selectinload(Question.author),
        selectinload(Question.department)
    )
    if department_id is not None:
        query = query.filter(Question.department_id == department_id)
    if status is not None:
        query = query.filter(Question.status == status)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Question.title.ilike(pattern), Question.content.ilike(pattern)))

    if sort == "popular":
        query = query.order_by((Question.upvotes - Question.downvotes).desc(), Question.created_at.desc())
    elif sort == "oldest":
        query = query.order_by(Question.created_at.asc(), Question.id.asc())
    else:
        query = query.order_by(Question.created_at.desc(), Question.id.desc())

    questions = query.all()
    votes = _my_votes(db, identity, [q.id for q in questions])
    return [question_view(q, votes.get(q.id)) for q in questions]


def get_question(db: Session, identity: Identity, question_id: int) -> QuestionDetail:
    authorize(identity, Resource.QUESTION, Action.READ)
    question = (
        db.query(Question)
        .options(
            selectinload(Question.answers).selectinload(Answer.comments).selectinload(Comment.author),
            selectinload(Question.answers).selectinload(Answer.author),
        )
        .filter(Question.id == question_id)
        .first()
    )
    if question is None:
        raise NotFound(detail=f"問題 {question_id} 不存在")

    votes = _my_votes(db, identity, [question.id])
    answers = []
    for answer in question.answers:
        item = AnswerSchema.model_validate(answer)
        # 匿名留言不顯示作者
        comments = [
            c.model_copy(update={"author": None}) if c.is_anonymous else c
            for c in item.comments
        ]
        answers.append(item.model_copy(update={"comments": comments}))

    base = question_view(question, votes.get(question.id))
    return QuestionDetail(**base.model_dump(), answers=answers)


def update_question(
    db: Session,
    identity: Identity,
    question_id: int,
    title: Optional[str] = None,
    content: Optional[str] = None,
    department_id=_UNSET,
    status: Optional[QuestionStatus] = None,
) -> Question:
    authorize(identity, Resource.QUESTION, Action.UPDATE)
    question = get_or_404(db, Question, question_id, detail=f"問題 {question_id} 不存在")

    if title is not None:
        question.title = clean_text(title, "title", TITLE_MAX_LENGTH)
    if content is not None:
        question.content = clean_text(content, "content", CONTENT_MAX_LENGTH)
    if department_id is not _UNSET:
        if department_id is not None:
            get_or_404(db, Department, department_id, detail=f"部門 {department_id} 不存在")
        question.department_id = department_id
    if status is not None:
        question.status = status

    db.commit()
    db.refresh(question)
    logger.info(f"管理員 {identity.user_id} 已更新問題 ID={question_id}")
    return question


def set_question_status(db: Session, identity: Identity, question_id: int, status: QuestionStatus) -> Question:
    return update_question(db, identity, question_id, status=status)


def delete_question(db: Session, identity: Identity, question_id: int) -> None:
    """刪除問題，回答、留言與投票一併刪除"""
    authorize(identity, Resource.QUESTION, Action.DELETE)
    question = get_or_404(db, Question, question_id, detail=f"問題 {question_id} 不存在")
    db.delete(question)
    db.commit()
    logger.info(f"管理員 {identity.user_id} 已刪除問題 ID={question_id}")


def create_answer(db: Session, identity: Identity, question_id: int, content: str) -> Answer:
    """
    發布回答

    只有 responder 或 admin 可以回答，回答標記為官方回答；
    問題若仍為 open 則改為 answered。
    """
    authorize(identity, Resource.ANSWER, Action.CREATE, owner_id=identity.user_id)
    content = clean_text(content, "content", ANSWER_MAX_LENGTH)
    question = get_or_404(db, Question, question_id, detail=f"問題 {question_id} 不存在")

    answer = Answer(
        question_id=question.id,
        content=content,
        author_id=identity.user_id,
        is_official=identity.is_responder,
    )
    db.add(answer)
    if answer.is_official and question.status == QuestionStatus.OPEN:
        question.status = QuestionStatus.ANSWERED

    db.commit()
    db.refresh(answer)
    logger.info(f"用戶 {identity.user_id} 已回答問題 ID={question_id}, 官方回答={answer.is_official}")
    return answer


def update_answer(db: Session, identity: Identity, answer_id: int, content: str) -> Answer:
    answer = get_or_404(db, Answer, answer_id, detail=f"回答 {answer_id} 不存在")
    authorize(identity, Resource.ANSWER, Action.UPDATE, owner_id=answer.author_id)
    answer.content = clean_text(content, "content", ANSWER_MAX_LENGTH)
    db.commit()
    db.refresh(answer)
    return answer


def delete_answer(db: Session, identity: Identity, answer_id: int) -> None:
    answer = get_or_404(db, Answer, answer_id, detail=f"回答 {answer_id} 不存在")
    authorize(identity, Resource.ANSWER, Action.DELETE, owner_id=answer.author_id)
    db.delete(answer)
    db.commit()
    logger.info(f"用戶 {identity.user_id} 已刪除回答 ID={answer_id}")


def create_comment(db: Session, identity: Identity, answer_id: int, content: str, is_anonymous: bool = True) -> Comment:
    author_id = None if is_anonymous else identity.user_id
    authorize(identity, Resource.COMMENT, Action.CREATE, owner_id=author_id, anonymous=is_anonymous)
    content = clean_text(content, "content", COMMENT_MAX_LENGTH)
    get_or_404(db, Answer, answer_id, detail=f"回答 {answer_id} 不存在")

    comment = Comment(answer_id=answer_id, content=content, author_id=author_id, is_anonymous=is_anonymous)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, identity: Identity, comment_id: int) -> None:
    authorize(identity, Resource.COMMENT, Action.DELETE)
    comment = get_or_404(db, Comment, comment_id, detail=f"留言 {comment_id} 不存在")
    db.delete(comment)
    db.commit()
    logger.info(f"管理員 {identity.user_id} 已刪除留言 ID={comment_id}")
