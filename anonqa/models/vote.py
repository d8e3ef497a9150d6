from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint, event
from sqlalchemy.orm import relationship, column_property
from sqlalchemy.orm.attributes import get_history
from datetime import datetime
import logging
from anonqa.database import Base
from anonqa.models.question import Question
import enum

logger = logging.getLogger(__name__)

class VoteType(str, enum.Enum):
    UP = "up"
    DOWN = "down"

class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("question_id", "user_id", name="uq_votes_question_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # 需要舊值才能調整計數
    vote_type = column_property(
        Column(Enum(VoteType, name="vote_type", values_callable=lambda e: [m.value for m in e]), nullable=False),
        active_history=True
    )
    created_at = Column(DateTime, default=datetime.utcnow)

    question = relationship("Question", back_populates="votes")
    user = relationship("User", back_populates="votes")


def counter_delta(old_type, new_type):
    """
    計算一筆投票變更對問題計數的影響

    Args:
        old_type: 變更前的投票類型，新增時為 None
        new_type: 變更後的投票類型，刪除時為 None

    Returns:
        tuple: (upvotes 變化量, downvotes 變化量)
    """
    up = down = 0
    if old_type == VoteType.UP:
        up -= 1
    elif old_type == VoteType.DOWN:
        down -= 1
    if new_type == VoteType.UP:
        up += 1
    elif new_type == VoteType.DOWN:
        down += 1
    return up, down


def _apply_counter_delta(connection, question_id, old_type, new_type):
    up, down = counter_delta(old_type, new_type)
    if not up and not down:
        return
    questions = Question.__table__
    # 在資料庫端以單一 UPDATE 同時調整兩個計數，與投票紀錄寫入同一交易
    connection.execute(
        questions.update()
        .where(questions.c.id == question_id)
        .values(
            upvotes=questions.c.upvotes + up,
            downvotes=questions.c.downvotes + down
        )
    )
    logger.debug(f"問題 {question_id} 計數調整: upvotes {up:+d}, downvotes {down:+d}")


@event.listens_for(Vote, "after_insert")
def _vote_inserted(mapper, connection, target):
    _apply_counter_delta(connection, target.question_id, None, target.vote_type)


@event.listens_for(Vote, "before_update")
def _vote_updated(mapper, connection, target):
    history = get_history(target, "vote_type")
    if not history.deleted:
        return
    _apply_counter_delta(connection, target.question_id, history.deleted[0], target.vote_type)


@event.listens_for(Vote, "before_delete")
def _vote_deleted(mapper, connection, target):
    _apply_counter_delta(connection, target.question_id, target.vote_type, None)
