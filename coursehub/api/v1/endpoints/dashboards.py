# coursehub/api/v1/endpoints/dashboards.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursehub.core.context import ADMIN, TEACHER, SessionContext
from coursehub.core.deps import get_session_context, require_role
from coursehub.db.session import get_db
from coursehub.schemas.dashboard import AdminDashboard, StudentDashboard, TeacherDashboard
from coursehub.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/student", response_model=StudentDashboard, summary="Tablero del estudiante")
def read_student_dashboard(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return StudentDashboard.model_validate(DashboardService(db).student_dashboard(ctx))


@router.get("/teacher", response_model=TeacherDashboard, summary="Tablero del profesor")
def read_teacher_dashboard(
    ctx: SessionContext = Depends(require_role(TEACHER)),
    db: Session = Depends(get_db),
):
    return TeacherDashboard.model_validate(DashboardService(db).teacher_dashboard(ctx))


@router.get("/admin", response_model=AdminDashboard, summary="Tablero de administración")
def read_admin_dashboard(
    ctx: SessionContext = Depends(require_role(ADMIN)),
    db: Session = Depends(get_db),
):
    return AdminDashboard.model_validate(DashboardService(db).admin_dashboard(ctx))
