from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from anonqa.errors import ConflictFailed, NotFound
from anonqa.models.question import Question
from anonqa.models.vote import Vote, VoteType
from anonqa.permissions import Action, Identity, Resource, authorize
from anonqa.schemas.vote import Vote as VoteSchema, VoteResult
from anonqa.services.helpers import commit_or_conflict, get_or_404

logger = logging.getLogger(__name__)


def _find_vote(db: Session, user_id: int, question_id: int, for_update: bool = False) -> Optional[Vote]:
    query = db.query(Vote).filter(Vote.question_id == question_id, Vote.user_id == user_id)
    if for_update:
        # 鎖定後重新讀取，避免沿用會話中過期的投票類型
        query = query.with_for_update().populate_existing()
    return query.first()


def _result(db: Session, question: Question, vote: Optional[Vote]) -> VoteResult:
    # 計數由資料庫端調整，需重新讀取
    db.refresh(question)
    return VoteResult(
        question_id=question.id,
        vote=VoteSchema.model_validate(vote) if vote is not None else None,
        upvotes=question.upvotes,
        downvotes=question.downvotes,
    )


def cast_vote(db: Session, identity: Identity, question_id: int, vote_type: VoteType) -> VoteResult:
    """新增投票，同一用戶對同一問題只能有一筆"""
    authorize(identity, Resource.VOTE, Action.CREATE, owner_id=identity.user_id)
    question = get_or_404(db, Question, question_id, detail=f"問題 {question_id} 不存在")

    if _find_vote(db, identity.user_id, question_id):
        raise ConflictFailed(detail="已經對此問題投票", reason="vote_exists")

    vote = Vote(question_id=question_id, user_id=identity.user_id, vote_type=vote_type)
    db.add(vote)
    commit_or_conflict(db, detail="已經對此問題投票", reason="vote_exists")
    db.refresh(vote)
    logger.info(f"用戶 {identity.user_id} 對問題 {question_id} 投票: {vote_type.value}")
    return _result(db, question, vote)


def change_vote(db: Session, identity: Identity, question_id: int, vote_type: VoteType) -> VoteResult:
    question = get_or_404(db, Question, question_id, detail=f"問題 {question_id} 不存在")
    vote = _find_vote(db, identity.user_id, question_id, for_update=True)
    if vote is None:
        raise NotFound(detail="尚未對此問題投票", reason="vote_not_found")
    authorize(identity, Resource.VOTE, Action.UPDATE, owner_id=vote.user_id)

    if vote.vote_type != vote_type:
        vote.vote_type = vote_type
        db.commit()
        db.refresh(vote)
        logger.info(f"用戶 {identity.user_id} 將問題 {question_id} 的投票改為 {vote_type.value}")
    return _result(db, question, vote)


def retract_vote(db: Session, identity: Identity, question_id: int) -> VoteResult:
    question = get_or_404(db, Question, question_id, detail=f"問題 {question_id} 不存在")
    vote = _find_vote(db, identity.user_id, question_id, for_update=True)
    if vote is None:
        raise NotFound(detail="尚未對此問題投票", reason="vote_not_found")
    authorize(identity, Resource.VOTE, Action.DELETE, owner_id=vote.user_id)

    db.delete(vote)
    db.commit()
    logger.info(f"用戶 {identity.user_id} 撤回問題 {question_id} 的投票")
    return _result(db, question, None)


def toggle_vote(db: Session, identity: Identity, question_id: int, vote_type: VoteType) -> VoteResult:
    """
    依目前狀態切換投票

    尚未投票則新增；投相同類型則撤回；投不同類型則改票。
    """
    authorize(identity, Resource.VOTE, Action.CREATE, owner_id=identity.user_id)
    existing = _find_vote(db, identity.user_id, question_id, for_update=True)
    if existing is None:
        return cast_vote(db, identity, question_id, vote_type)
    if existing.vote_type == vote_type:
        return retract_vote(db, identity, question_id)
    return change_vote(db, identity, question_id, vote_type)


def list_my_votes(db: Session, identity: Identity) -> List[Vote]:
    authorize(identity, Resource.VOTE, Action.READ, owner_id=identity.user_id)
    return (
        db.query(Vote)
        .filter(Vote.user_id == identity.user_id)
        .order_by(Vote.created_at.desc(), Vote.id.desc())
        .all()
    )
