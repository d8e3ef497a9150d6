from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from anonqa.database import Base

CONTENT_MAX_LENGTH = 10000

class Answer(Base):
    __tablename__ = "answers"
    __table_args__ = (
        CheckConstraint(f"length(content) <= {CONTENT_MAX_LENGTH}", name="ck_answers_content_length"),
    )

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # 發布時作者具備 responder 或 admin 角色
    is_official = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    question = relationship("Question", back_populates="answers")
    author = relationship("User", back_populates="answers")
    comments = relationship(
        "Comment",
        back_populates="answer",
        cascade="all, delete-orphan",
        order_by="[Comment.created_at, Comment.id]"
    )
