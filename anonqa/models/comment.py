from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from anonqa.database import Base

CONTENT_MAX_LENGTH = 2000

class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        CheckConstraint(f"length(content) <= {CONTENT_MAX_LENGTH}", name="ck_comments_content_length"),
        CheckConstraint("is_anonymous OR author_id IS NOT NULL", name="ck_comments_anonymous_author"),
    )

    id = Column(Integer, primary_key=True, index=True)
    answer_id = Column(Integer, ForeignKey("answers.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_anonymous = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    answer = relationship("Answer", back_populates="comments")
    author = relationship("User", back_populates="comments")
