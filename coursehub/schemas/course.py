from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, computed_field

from coursehub.utils.formatting import format_bytes


class CourseBase(BaseModel):
    """
    Schema base para las propiedades compartidas de un curso.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    thumbnail: Optional[str] = None


class CourseCreate(CourseBase):
    published: bool = True


class CourseUpdate(CourseBase):
    """
    Schema para actualizar un curso. video_ids, si viene, es el nuevo orden
    de los videos; los que no aparezcan se eliminan.
    """
    published: Optional[bool] = None
    video_ids: Optional[List[str]] = None


class Video(BaseModel):
    id: str
    course_id: int
    name: str
    video_url: Optional[str] = None
    thumbnail: Optional[str] = None
    size_bytes: int = 0
    duration_seconds: float = 0.0
    position: int

    @computed_field
    @property
    def size_label(self) -> str:
        return format_bytes(self.size_bytes)

    class Config:
        from_attributes = True


class Course(BaseModel):
    id: int
    title: str
    description: str
    category: str
    level: str
    thumbnail: Optional[str] = None
    creator_email: str
    creator_name: str
    published: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CourseDetail(Course):
    """
    Curso con sus videos ordenados por posición.
    """
    videos: List[Video] = []


class CatalogEntry(BaseModel):
    course: Course
    video_count: int
    average_rating: float
    rating_count: int
    enrolled: bool = False

    class Config:
        from_attributes = True


class EnrollmentResult(BaseModel):
    course_id: int
    enrolled: bool
    already_enrolled: bool = False
