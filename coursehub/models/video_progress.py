# coursehub/models/video_progress.py
from sqlalchemy import Column, Integer, String, Float, DateTime, UniqueConstraint

from coursehub.db.base import Base
from coursehub.models.user import utcnow


class VideoProgress(Base):
    """
    Posición de reproducción por (usuario, curso, video).
    Un solo registro por tripleta; las escrituras son upsert.
    """
    __tablename__ = "video_progress"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_email = Column(String(255), nullable=False, index=True)
    course_id = Column(Integer, nullable=False, index=True)
    video_id = Column(String(64), nullable=False, index=True)
    time_position = Column(Float, default=0.0, nullable=False)
    duration = Column(Float, default=0.0, nullable=False)
    percentage = Column(Float, default=0.0, nullable=False)
    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('user_email', 'course_id', 'video_id', name='uq_progress_user_course_video'),
    )

    def __repr__(self):
        return (
            f"<VideoProgress(user='{self.user_email}', course_id={self.course_id}, "
            f"video_id='{self.video_id}', percentage={self.percentage})>"
        )
