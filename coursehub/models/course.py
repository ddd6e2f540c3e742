# coursehub/models/course.py
from sqlalchemy import (
    Boolean, Column, Integer, BigInteger, Float, String, Text, DateTime,
    ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from coursehub.db.base import Base
from coursehub.models.user import utcnow


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False, default="General", index=True)
    level = Column(String(50), nullable=False, default="Beginner")
    thumbnail = Column(Text, nullable=True)
    creator_email = Column(String(255), nullable=False, index=True)
    creator_name = Column(String(255), nullable=False, default="")
    published = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    videos = relationship(
        "Video",
        back_populates="course",
        order_by="Video.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Course(id={self.id}, title='{self.title}', creator='{self.creator_email}')>"


class Video(Base):
    """
    Video de un curso. position es la llave de orden (base 0).
    """
    __tablename__ = "videos"

    id = Column(String(64), primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    video_url = Column(Text, nullable=True)
    storage_path = Column(String(500), nullable=True)
    thumbnail = Column(Text, nullable=True)
    size_bytes = Column(BigInteger, nullable=False, default=0)
    duration_seconds = Column(Float, nullable=False, default=0.0)
    position = Column(Integer, nullable=False, default=0)

    course = relationship("Course", back_populates="videos")

    def __repr__(self):
        return f"<Video(id='{self.id}', course_id={self.course_id}, position={self.position})>"


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_email = Column(String(255), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_email', 'course_id', name='uq_enrollment_user_course'),
    )
