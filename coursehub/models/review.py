# coursehub/models/review.py
from sqlalchemy import (
    Boolean, Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from coursehub.db.base import Base
from coursehub.models.user import utcnow


class Review(Base):
    """
    Reseña de curso. rating es la foto de la calificación del autor al publicar.
    """
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(String(64), unique=True, nullable=False, index=True)
    course_id = Column(Integer, nullable=False, index=True)
    user_email = Column(String(255), nullable=False, index=True)
    user_name = Column(String(255), nullable=False, default="")
    user_initials = Column(String(4), nullable=False, default="")
    user_type = Column(String(20), nullable=False, default="student")
    content = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    helpful_up = Column(Integer, nullable=False, default=0)
    helpful_down = Column(Integer, nullable=False, default=0)
    edited = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    replies = relationship(
        "ReviewReply",
        back_populates="review",
        order_by="ReviewReply.id",
        cascade="all, delete-orphan",
    )
    votes = relationship("ReviewHelpfulVote", cascade="all, delete-orphan")


class ReviewReply(Base):
    __tablename__ = "review_replies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reply_id = Column(String(64), unique=True, nullable=False, index=True)
    review_id = Column(String(64), ForeignKey("reviews.review_id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=False, default="")
    user_initials = Column(String(4), nullable=False, default="")
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    review = relationship("Review", back_populates="replies")


class ReviewHelpfulVote(Base):
    __tablename__ = "review_helpful_votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(String(64), ForeignKey("reviews.review_id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    vote = Column(String(4), nullable=False)

    __table_args__ = (
        UniqueConstraint('review_id', 'user_email', name='uq_helpful_review_user'),
    )
