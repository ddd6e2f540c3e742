# coursehub/models/rating.py
from sqlalchemy import Column, Integer, String, Float, DateTime, UniqueConstraint

from coursehub.db.base import Base
from coursehub.models.user import utcnow


class Rating(Base):
    """
    Calificación 0-5 de un usuario sobre un curso o un video.
    subject_id es el id del curso (como texto) o el id del video.
    """
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    subject_type = Column(String(10), nullable=False)
    subject_id = Column(String(64), nullable=False)
    course_id = Column(Integer, nullable=False, index=True)
    user_email = Column(String(255), nullable=False, index=True)
    value = Column(Float, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('subject_type', 'subject_id', 'user_email', name='uq_rating_subject_user'),
    )
