# coursehub/api/v1/endpoints/courses.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from coursehub.core.context import TEACHER, SessionContext
from coursehub.core.deps import get_optional_session_context, get_session_context, require_role
from coursehub.db.session import get_db
from coursehub.schemas.course import (
    CatalogEntry, Course, CourseCreate, CourseDetail, CourseUpdate, EnrollmentResult, Video
)
from coursehub.services.catalog_service import ALL_CATEGORIES, CatalogService
from coursehub.services.course_service import CourseService
from coursehub.services.storage_service import get_storage

router = APIRouter()


def get_course_service(db: Session = Depends(get_db)) -> CourseService:
    return CourseService(db, storage=get_storage())


# --- Catálogo ---

@router.get("/", response_model=List[CatalogEntry], summary="Buscar cursos publicados")
def search_courses(
    q: str = "",
    category: str = ALL_CATEGORIES,
    ctx: Optional[SessionContext] = Depends(get_optional_session_context),
    db: Session = Depends(get_db),
):
    """
    Búsqueda pública. Con sesión, cada resultado indica si el usuario ya
    está inscrito.
    """
    entries = CatalogService(db).search(q, category=category, user_email=ctx.email if ctx else None)
    return [CatalogEntry.model_validate(entry) for entry in entries]


@router.get("/categories", response_model=List[str], summary="Categorías con cursos publicados")
def read_categories(db: Session = Depends(get_db)):
    return CatalogService(db).categories()


@router.get("/recommended", response_model=List[CatalogEntry], summary="Cursos recomendados")
def read_recommended(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return [CatalogEntry.model_validate(entry) for entry in CatalogService(db).recommended(ctx)]


@router.get("/enrolled", response_model=List[Course], summary="Cursos en los que estoy inscrito")
def read_enrolled_courses(
    ctx: SessionContext = Depends(get_session_context),
    service: CourseService = Depends(get_course_service),
):
    return service.user_courses(ctx.email)


@router.get("/created", response_model=List[Course], summary="Cursos que he creado")
def read_created_courses(
    ctx: SessionContext = Depends(require_role(TEACHER)),
    service: CourseService = Depends(get_course_service),
):
    return service.created_courses(ctx.email)


# --- Cursos ---

@router.post("/", response_model=CourseDetail, status_code=status.HTTP_201_CREATED,
             summary="Crear curso")
def create_course(
    payload: CourseCreate,
    ctx: SessionContext = Depends(require_role(TEACHER)),
    service: CourseService = Depends(get_course_service),
):
    return service.create_course(ctx, payload.model_dump())


@router.get("/{course_id}", response_model=CourseDetail, summary="Detalle del curso")
def read_course(course_id: int, service: CourseService = Depends(get_course_service)):
    return service.get_course(course_id)


@router.put("/{course_id}", response_model=CourseDetail, summary="Actualizar curso")
def update_course(
    course_id: int,
    payload: CourseUpdate,
    ctx: SessionContext = Depends(get_session_context),
    service: CourseService = Depends(get_course_service),
):
    return service.update_course(course_id, ctx, payload.model_dump(exclude_unset=True))


@router.delete("/{course_id}", summary="Eliminar curso")
def delete_course(
    course_id: int,
    ctx: SessionContext = Depends(get_session_context),
    service: CourseService = Depends(get_course_service),
):
    service.delete_course(course_id, ctx)
    return {"message": "Curso eliminado", "course_id": course_id}


# --- Videos ---

@router.post("/{course_id}/videos", response_model=Video, status_code=status.HTTP_201_CREATED,
             summary="Subir un video al curso")
def upload_video(
    course_id: int,
    file: UploadFile = File(...),
    duration: float = Form(...),
    name: Optional[str] = Form(None),
    ctx: SessionContext = Depends(get_session_context),
    service: CourseService = Depends(get_course_service),
):
    return service.add_video(
        course_id,
        ctx,
        filename=file.filename or "video",
        content_type=file.content_type or "",
        data=file.file.read(),
        duration=duration,
        name=name,
    )


@router.delete("/{course_id}/videos/{video_id}", summary="Eliminar un video del curso")
def delete_video(
    course_id: int,
    video_id: str,
    ctx: SessionContext = Depends(get_session_context),
    service: CourseService = Depends(get_course_service),
):
    service.remove_video(course_id, video_id, ctx)
    return {"message": "Video eliminado", "video_id": video_id}


# --- Inscripciones ---

@router.post("/{course_id}/enroll", response_model=EnrollmentResult, summary="Inscribirse al curso")
def enroll(
    course_id: int,
    ctx: SessionContext = Depends(get_session_context),
    service: CourseService = Depends(get_course_service),
):
    enrolled, already_enrolled = service.enroll(ctx, course_id)
    return {"course_id": course_id, "enrolled": enrolled, "already_enrolled": already_enrolled}


@router.delete("/{course_id}/enroll", response_model=EnrollmentResult, summary="Cancelar inscripción")
def unenroll(
    course_id: int,
    ctx: SessionContext = Depends(get_session_context),
    service: CourseService = Depends(get_course_service),
):
    service.unenroll(ctx, course_id)
    return {"course_id": course_id, "enrolled": False}


@router.get("/{course_id}/enrollment", response_model=EnrollmentResult, summary="¿Estoy inscrito?")
def read_enrollment(
    course_id: int,
    ctx: SessionContext = Depends(get_session_context),
    service: CourseService = Depends(get_course_service),
):
    return {"course_id": course_id, "enrolled": service.is_enrolled(ctx.email, course_id)}
