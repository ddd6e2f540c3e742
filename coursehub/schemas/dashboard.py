from typing import Dict, List

from pydantic import BaseModel

from coursehub.schemas.course import CatalogEntry, Course


class CourseProgressSummary(BaseModel):
    course: Course
    progress: float
    is_completed: bool

    class Config:
        from_attributes = True


class StudentDashboard(BaseModel):
    enrolled_count: int
    completed_count: int
    continue_learning: List[CourseProgressSummary]
    recommended: List[CatalogEntry]

    class Config:
        from_attributes = True


class TeacherCourseSummary(BaseModel):
    course: Course
    video_count: int
    student_count: int
    average_rating: float
    rating_count: int

    class Config:
        from_attributes = True


class TeacherDashboard(BaseModel):
    courses: List[TeacherCourseSummary]
    total_courses: int
    total_students: int
    total_videos: int
    average_rating: float

    class Config:
        from_attributes = True


class AdminDashboard(BaseModel):
    total_users: int
    users_by_type: Dict[str, int]
    users_by_status: Dict[str, int]
    total_courses: int
    published_courses: int
    total_enrollments: int

    class Config:
        from_attributes = True
