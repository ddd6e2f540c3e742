# coursehub/services/course_service.py
"""
Alta y mantenimiento de cursos, sus videos y las inscripciones.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from coursehub.core.config import settings
from coursehub.core.context import SessionContext, require_context
from coursehub.core.exceptions import (
    ConflictError, EligibilityError, NotFoundError, StoreError, ValidationError
)
from coursehub.crud import crud_course
from coursehub.models.course import Course, Video
from coursehub.services.storage_service import StorageService, build_video_path
from coursehub.utils.formatting import generate_id

logger = logging.getLogger("coursehub.courses")

COURSE_DEFAULTS = {
    "title": "Untitled Course",
    "description": "",
    "category": "General",
    "level": "Beginner",
    "thumbnail": "📚",
}
EDITABLE_COURSE_FIELDS = ("title", "description", "category", "level", "thumbnail", "published")
VIDEO_COPY_FIELDS = ("name", "video_url", "storage_path", "thumbnail", "size_bytes", "duration_seconds")


class CourseService:

    def __init__(self, db: Session, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage or StorageService()

    # ── Cursos ──

    def get_course(self, course_id: int) -> Course:
        course = crud_course.get_course(self.db, course_id)
        if course is None:
            raise NotFoundError("Curso no encontrado")
        return course

    def _get_owned_course(self, course_id: int, ctx: SessionContext) -> Course:
        course = self.get_course(course_id)
        if course.creator_email != ctx.email and not ctx.is_admin:
            raise EligibilityError("Solo el creador del curso puede modificarlo")
        return course

    def create_course(self, ctx: Optional[SessionContext], data: Dict[str, Any]) -> Course:
        ctx = require_context(ctx)
        if not ctx.is_teacher:
            raise EligibilityError("Solo los profesores pueden crear cursos")

        fields = {key: (data.get(key) or default) for key, default in COURSE_DEFAULTS.items()}
        fields["title"] = fields["title"].strip() or COURSE_DEFAULTS["title"]
        course = crud_course.create_course(
            self.db,
            creator_email=ctx.email,
            creator_name=ctx.display_name,
            published=data.get("published", True),
            **fields,
        )
        logger.info(f"Curso {course.id} creado por {ctx.email}")
        return course

    def update_course(self, course_id: int, ctx: Optional[SessionContext], data: Dict[str, Any]) -> Course:
        """
        Actualiza campos editables. Si data trae 'video_ids', es el nuevo orden
        de los videos: los que no aparecen se eliminan y las posiciones se
        renumeran desde 0.
        """
        ctx = require_context(ctx)
        course = self._get_owned_course(course_id, ctx)

        fields = {key: data[key] for key in EDITABLE_COURSE_FIELDS if data.get(key) is not None}
        if "title" in fields and not fields["title"].strip():
            raise ValidationError("El título no puede estar vacío")
        if fields:
            course = crud_course.update_course(self.db, course, **fields)

        if data.get("video_ids") is not None:
            self._reorder_videos(course_id, list(data["video_ids"]))
            self.db.refresh(course)
        return course

    def _reorder_videos(self, course_id: int, video_ids: List[str]) -> List[Video]:
        current = {video.id: video for video in crud_course.get_videos(self.db, course_id)}
        unknown = [video_id for video_id in video_ids if video_id not in current]
        if unknown:
            raise ValidationError(f"Videos que no pertenecen al curso: {', '.join(unknown)}")
        if len(set(video_ids)) != len(video_ids):
            raise ValidationError("La lista de videos tiene IDs repetidos")

        dropped = [video for video_id, video in current.items() if video_id not in video_ids]
        for video in dropped:
            self._remove_stored_file(video)

        rows = []
        for video_id in video_ids:
            video = current[video_id]
            row = {field: getattr(video, field) for field in VIDEO_COPY_FIELDS}
            row["id"] = video_id
            rows.append(row)
        return crud_course.replace_videos(self.db, course_id, rows)

    def delete_course(self, course_id: int, ctx: Optional[SessionContext]) -> Course:
        ctx = require_context(ctx)
        course = self._get_owned_course(course_id, ctx)
        for video in list(course.videos):
            self._remove_stored_file(video)
        logger.info(f"Curso {course_id} eliminado por {ctx.email}")
        return crud_course.delete_course(self.db, course)

    # ── Videos ──

    def add_video(
        self,
        course_id: int,
        ctx: Optional[SessionContext],
        filename: str,
        content_type: str,
        data: bytes,
        duration: float,
        name: Optional[str] = None,
    ) -> Video:
        """
        Sube el archivo al almacén y lo agrega al final del curso.

        Raises:
            ValidationError: tipo, tamaño o duración inválidos
            EligibilityError: el usuario no es dueño del curso
            StoreError: falló la subida
        """
        ctx = require_context(ctx)
        self._get_owned_course(course_id, ctx)

        if not (content_type or "").startswith("video/"):
            raise ValidationError(f"{filename} no es un archivo de video")
        if len(data) > settings.MAX_VIDEO_SIZE_BYTES:
            raise ValidationError(f"{filename} excede el tamaño máximo de 100MB")
        if not duration or duration <= 0:
            raise ValidationError("No se pudo determinar la duración del video")

        video_id = generate_id("video")
        path = build_video_path(ctx.email, video_id, filename)
        self.storage.upload(path, data)

        try:
            video = crud_course.add_video(
                self.db,
                course_id,
                id=video_id,
                name=name or filename,
                video_url=self.storage.get_public_url(path),
                storage_path=path,
                size_bytes=len(data),
                duration_seconds=round(duration) if duration >= 1 else duration,
            )
        except StoreError:
            self.storage.remove(path)
            raise

        logger.info(f"Video {video_id} agregado al curso {course_id} ({len(data)} bytes)")
        return video

    def remove_video(self, course_id: int, video_id: str, ctx: Optional[SessionContext]) -> Video:
        ctx = require_context(ctx)
        self._get_owned_course(course_id, ctx)
        video = crud_course.get_video(self.db, video_id)
        if video is None or video.course_id != course_id:
            raise NotFoundError("Video no encontrado")
        self._remove_stored_file(video)
        return crud_course.delete_video(self.db, video)

    def _remove_stored_file(self, video: Video) -> None:
        path = video.storage_path or self.storage.path_from_public_url(video.video_url)
        if not path:
            return
        try:
            self.storage.remove(path)
        except StoreError as e:
            logger.warning(f"No se pudo eliminar el archivo {path}: {e.message}")

    # ── Inscripciones ──

    def enroll(self, ctx: Optional[SessionContext], course_id: int) -> Tuple[bool, bool]:
        """
        Inscribe al usuario. Devuelve (inscrito, ya_estaba_inscrito); una
        inscripción repetida no es un error.
        """
        ctx = require_context(ctx)
        course = self.get_course(course_id)
        if course.creator_email == ctx.email:
            raise EligibilityError("No puedes inscribirte en tu propio curso")
        try:
            crud_course.create_enrollment(self.db, ctx.email, course_id)
        except ConflictError:
            logger.info(f"{ctx.email} ya estaba inscrito en el curso {course_id}")
            return True, True
        logger.info(f"{ctx.email} inscrito en el curso {course_id}")
        return True, False

    def unenroll(self, ctx: Optional[SessionContext], course_id: int) -> bool:
        ctx = require_context(ctx)
        return crud_course.delete_enrollment(self.db, ctx.email, course_id) > 0

    def is_enrolled(self, user_email: str, course_id: int) -> bool:
        try:
            return crud_course.get_enrollment(self.db, user_email, course_id) is not None
        except StoreError as e:
            logger.warning(f"No se pudo leer la inscripción: {e.message}")
            return False

    def user_courses(self, user_email: str) -> List[Course]:
        try:
            course_ids = crud_course.get_enrolled_course_ids(self.db, user_email)
            return crud_course.get_courses(self.db, course_ids=course_ids)
        except StoreError as e:
            logger.warning(f"No se pudieron leer los cursos de {user_email}: {e.message}")
            return []

    def created_courses(self, user_email: str) -> List[Course]:
        try:
            return crud_course.get_courses(self.db, creator_email=user_email)
        except StoreError as e:
            logger.warning(f"No se pudieron leer los cursos creados por {user_email}: {e.message}")
            return []
