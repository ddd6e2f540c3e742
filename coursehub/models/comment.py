# coursehub/models/comment.py
from sqlalchemy import (
    Boolean, Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from coursehub.db.base import Base
from coursehub.models.user import utcnow


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    comment_id = Column(String(64), unique=True, nullable=False, index=True)
    course_id = Column(Integer, nullable=False, index=True)
    user_email = Column(String(255), nullable=False, index=True)
    user_name = Column(String(255), nullable=False, default="")
    user_initials = Column(String(4), nullable=False, default="")
    user_type = Column(String(20), nullable=False, default="student")
    content = Column(Text, nullable=False)
    likes = Column(Integer, nullable=False, default=0)
    edited = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    replies = relationship(
        "CommentReply",
        back_populates="comment",
        order_by="CommentReply.id",
        cascade="all, delete-orphan",
    )
    like_rows = relationship("CommentLike", cascade="all, delete-orphan")


class CommentReply(Base):
    __tablename__ = "comment_replies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reply_id = Column(String(64), unique=True, nullable=False, index=True)
    comment_id = Column(String(64), ForeignKey("comments.comment_id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=False, default="")
    user_initials = Column(String(4), nullable=False, default="")
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    comment = relationship("Comment", back_populates="replies")


class CommentLike(Base):
    __tablename__ = "comment_likes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    comment_id = Column(String(64), ForeignKey("comments.comment_id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint('comment_id', 'user_email', name='uq_comment_like_user'),
    )
