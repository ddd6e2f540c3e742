# coursehub/services/dashboard_service.py
"""
Resúmenes para los tableros de estudiante, profesor y administrador.
Son solo lecturas: cualquier error del almacén deja el tablero en ceros.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext, require_context
from coursehub.core.exceptions import EligibilityError, StoreError
from coursehub.crud import crud_course, crud_user
from coursehub.models.course import Course
from coursehub.services.catalog_service import CatalogEntry, CatalogService
from coursehub.services.course_service import CourseService
from coursehub.services.progress_tracker import ProgressTracker, VIDEO_COMPLETION_THRESHOLD
from coursehub.services.rating_service import RatingService, RatingSubject

logger = logging.getLogger("coursehub.dashboards")


@dataclass
class CourseProgressSummary:
    course: Course
    progress: float
    is_completed: bool


@dataclass
class StudentDashboard:
    enrolled_count: int = 0
    completed_count: int = 0
    continue_learning: List[CourseProgressSummary] = field(default_factory=list)
    recommended: List[CatalogEntry] = field(default_factory=list)


@dataclass
class TeacherCourseSummary:
    course: Course
    video_count: int
    student_count: int
    average_rating: float
    rating_count: int


@dataclass
class TeacherDashboard:
    courses: List[TeacherCourseSummary] = field(default_factory=list)
    total_courses: int = 0
    total_students: int = 0
    total_videos: int = 0
    average_rating: float = 0.0


@dataclass
class AdminDashboard:
    total_users: int = 0
    users_by_type: Dict[str, int] = field(default_factory=dict)
    users_by_status: Dict[str, int] = field(default_factory=dict)
    total_courses: int = 0
    published_courses: int = 0
    total_enrollments: int = 0


class DashboardService:

    def __init__(self, db: Session):
        self.db = db

    def student_dashboard(self, ctx: Optional[SessionContext]) -> StudentDashboard:
        ctx = require_context(ctx)
        tracker = ProgressTracker(self.db)
        dashboard = StudentDashboard()

        for course in CourseService(self.db).user_courses(ctx.email):
            progress = tracker.get_course_progress(ctx.email, course.id)
            dashboard.continue_learning.append(CourseProgressSummary(
                course=course,
                progress=progress,
                is_completed=progress >= VIDEO_COMPLETION_THRESHOLD,
            ))

        dashboard.enrolled_count = len(dashboard.continue_learning)
        dashboard.completed_count = sum(1 for item in dashboard.continue_learning if item.is_completed)
        dashboard.recommended = CatalogService(self.db).recommended(ctx)
        return dashboard

    def teacher_dashboard(self, ctx: Optional[SessionContext]) -> TeacherDashboard:
        ctx = require_context(ctx)
        if not ctx.is_teacher:
            raise EligibilityError("El tablero de profesor es solo para profesores")

        dashboard = TeacherDashboard()
        try:
            for course in CourseService(self.db).created_courses(ctx.email):
                stats = RatingService.rating_stats(self.db, RatingSubject.course(course.id))
                dashboard.courses.append(TeacherCourseSummary(
                    course=course,
                    video_count=crud_course.count_videos(self.db, course.id),
                    student_count=crud_course.count_enrollments(self.db, course_id=course.id),
                    average_rating=stats.average,
                    rating_count=stats.count,
                ))
        except StoreError as e:
            logger.warning(f"Tablero de profesor incompleto para {ctx.email}: {e.message}")

        rated = [summary.average_rating for summary in dashboard.courses if summary.rating_count]
        dashboard.total_courses = len(dashboard.courses)
        dashboard.total_students = sum(summary.student_count for summary in dashboard.courses)
        dashboard.total_videos = sum(summary.video_count for summary in dashboard.courses)
        dashboard.average_rating = sum(rated) / len(rated) if rated else 0.0
        return dashboard

    def admin_dashboard(self, ctx: Optional[SessionContext]) -> AdminDashboard:
        ctx = require_context(ctx)
        if not ctx.is_admin:
            raise EligibilityError("Se requieren permisos de administrador")

        dashboard = AdminDashboard()
        try:
            dashboard.users_by_type = crud_user.count_users_by_type(self.db)
            dashboard.users_by_status = crud_user.count_users_by_status(self.db)
            courses = crud_course.get_courses(self.db)
            dashboard.total_enrollments = crud_course.count_enrollments(self.db)
        except StoreError as e:
            logger.warning(f"Tablero de administración degradado: {e.message}")
            return dashboard

        dashboard.total_users = sum(dashboard.users_by_type.values())
        dashboard.total_courses = len(courses)
        dashboard.published_courses = sum(1 for course in courses if course.published)
        return dashboard
