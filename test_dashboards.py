"""
Pruebas de los tableros de estudiante, profesor y administrador.
"""
import pytest

from coursehub.core.exceptions import AuthenticationRequiredError, EligibilityError
from coursehub.crud import crud_course
from coursehub.services.dashboard_service import DashboardService
from coursehub.services.progress_tracker import ProgressTracker
from coursehub.services.rating_service import RatingService, RatingSubject


@pytest.fixture
def second_course(db, teacher):
    other = crud_course.create_course(
        db, title="Estadística básica", category="Data",
        creator_email=teacher.email, creator_name="Tomas Vega",
    )
    crud_course.add_video(db, other.id, id="video_c", name="Media y mediana", duration_seconds=300)
    return other


def test_student_dashboard(db, course, second_course, student_ctx):
    crud_course.create_enrollment(db, student_ctx.email, course.id)
    tracker = ProgressTracker(db)
    tracker.record_tick(student_ctx.email, course.id, "video_a", 100, 100)
    tracker.record_tick(student_ctx.email, course.id, "video_b", 200, 200)

    dashboard = DashboardService(db).student_dashboard(student_ctx)
    assert dashboard.enrolled_count == 1
    assert dashboard.completed_count == 1
    assert dashboard.continue_learning[0].course.id == course.id
    assert dashboard.continue_learning[0].progress == pytest.approx(100)
    assert [entry.course.id for entry in dashboard.recommended] == [second_course.id]


def test_student_dashboard_requires_session(db):
    with pytest.raises(AuthenticationRequiredError):
        DashboardService(db).student_dashboard(None)


def test_teacher_dashboard(db, course, second_course, teacher_ctx, student, student2):
    crud_course.create_enrollment(db, student.email, course.id)
    crud_course.create_enrollment(db, student2.email, course.id)
    crud_course.create_enrollment(db, student.email, second_course.id)
    RatingService.set_rating(db, RatingSubject.course(course.id), student.email, 4)
    RatingService.set_rating(db, RatingSubject.course(course.id), student2.email, 5)

    dashboard = DashboardService(db).teacher_dashboard(teacher_ctx)
    assert dashboard.total_courses == 2
    assert dashboard.total_students == 3
    assert dashboard.total_videos == 3
    assert dashboard.average_rating == pytest.approx(4.5)

    summary = next(s for s in dashboard.courses if s.course.id == course.id)
    assert (summary.student_count, summary.video_count, summary.rating_count) == (2, 2, 2)


def test_teacher_dashboard_only_for_teachers(db, student_ctx):
    with pytest.raises(EligibilityError):
        DashboardService(db).teacher_dashboard(student_ctx)


def test_admin_dashboard(db, course, admin_ctx, student, teacher2, student_ctx):
    crud_course.create_enrollment(db, student.email, course.id)

    dashboard = DashboardService(db).admin_dashboard(admin_ctx)
    assert dashboard.total_users == 4
    assert dashboard.users_by_type == {"admin": 1, "student": 1, "teacher": 2}
    assert dashboard.users_by_status == {"active": 4}
    assert dashboard.total_courses == 1
    assert dashboard.published_courses == 1
    assert dashboard.total_enrollments == 1

    with pytest.raises(EligibilityError):
        DashboardService(db).admin_dashboard(student_ctx)
