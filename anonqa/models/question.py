from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from anonqa.database import Base
import enum

TITLE_MAX_LENGTH = 500
CONTENT_MAX_LENGTH = 10000

class QuestionStatus(str, enum.Enum):
    OPEN = "open"  # 待回覆
    ANSWERED = "answered"  # 已回覆
    CLOSED = "closed"  # 已結案

class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint(f"length(title) <= {TITLE_MAX_LENGTH}", name="ck_questions_title_length"),
        CheckConstraint(f"length(content) <= {CONTENT_MAX_LENGTH}", name="ck_questions_content_length"),
        CheckConstraint("upvotes >= 0", name="ck_questions_upvotes"),
        CheckConstraint("downvotes >= 0", name="ck_questions_downvotes"),
        # 匿名問題不記錄作者
        CheckConstraint(
            "(is_anonymous AND author_id IS NULL) OR (NOT is_anonymous AND author_id IS NOT NULL)",
            name="ck_questions_anonymous_author"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    content = Column(Text, nullable=False)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True)
    is_anonymous = Column(Boolean, nullable=False, default=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(
        Enum(QuestionStatus, name="question_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=QuestionStatus.OPEN
    )
    # 由投票紀錄自動維護，請勿直接修改
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User", back_populates="questions")
    department = relationship("Department", back_populates="questions")

    answers = relationship(
        "Answer",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="[Answer.is_official.desc(), Answer.created_at, Answer.id]"
    )
    votes = relationship("Vote", back_populates="question", cascade="all, delete-orphan")

    @property
    def score(self):
        return (self.upvotes or 0) - (self.downvotes or 0)
