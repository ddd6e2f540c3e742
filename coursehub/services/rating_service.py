# coursehub/services/rating_service.py
"""
Calificaciones 0-5 sobre cursos y videos, promedio, distribución y la
política de participación compartida con las reseñas.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext, require_context
from coursehub.core.exceptions import EligibilityError, StoreError, ValidationError
from coursehub.core.metrics import RATINGS_SET_TOTAL
from coursehub.crud import crud_course, crud_rating
from coursehub.models.course import Course
from coursehub.utils.formatting import clamp, round_half_up

logger = logging.getLogger("coursehub.ratings")

MIN_RATING = 0.0
MAX_RATING = 5.0
STAR_BINS = (5, 4, 3, 2, 1)


@dataclass(frozen=True)
class RatingSubject:
    """Lo que se califica: un curso completo o un video dentro de un curso."""
    subject_type: str
    subject_id: str
    course_id: int

    @classmethod
    def course(cls, course_id: int) -> "RatingSubject":
        return cls("course", str(course_id), course_id)

    @classmethod
    def video(cls, course_id: int, video_id: str) -> "RatingSubject":
        return cls("video", video_id, course_id)


@dataclass
class RatingDistribution:
    total: int = 0
    counts: Dict[int, int] = field(default_factory=lambda: {star: 0 for star in STAR_BINS})
    percentages: Dict[int, float] = field(default_factory=lambda: {star: 0.0 for star in STAR_BINS})


@dataclass
class RatingStats:
    average: float
    count: int
    distribution: RatingDistribution


def star_bin(value: float) -> int:
    """Estrella (1-5) en la que cae un valor continuo."""
    return int(clamp(round_half_up(value), 1, 5))


def rating_distribution(values: Iterable[float]) -> RatingDistribution:
    """
    Agrupa los valores por round(valor) en las estrellas 1-5.
    El porcentaje de cada estrella es count / total * 100 (0 sin datos).
    """
    distribution = RatingDistribution()
    for value in values:
        distribution.counts[star_bin(value)] += 1
        distribution.total += 1

    if distribution.total:
        for star in STAR_BINS:
            distribution.percentages[star] = distribution.counts[star] / distribution.total * 100
    return distribution


def mean(values) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def participation_allowed(course: Optional[Course], ctx: Optional[SessionContext], enrolled: bool) -> bool:
    """
    Regla única para calificar y reseñar:
    - el curso debe existir
    - el creador del curso nunca participa en su propio curso
    - un profesor puede participar en cualquier otro curso
    - estudiantes y administradores deben estar inscritos
    """
    if course is None or ctx is None:
        return False
    if course.creator_email == ctx.email:
        return False
    if ctx.is_teacher:
        return True
    return enrolled


class RatingService:
    """Lecturas y escrituras de calificaciones."""

    # ── Escrituras ──

    @staticmethod
    def set_rating(db: Session, subject: RatingSubject, user_email: str, value: float) -> float:
        """
        Registra o sobrescribe la calificación del usuario. No valida
        elegibilidad: quien llama debe aplicar can_rate antes.
        """
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ValidationError("La calificación debe ser un número entre 0 y 5")
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValidationError("La calificación debe estar entre 0 y 5")

        rating = crud_rating.upsert_rating(
            db,
            subject_type=subject.subject_type,
            subject_id=subject.subject_id,
            course_id=subject.course_id,
            user_email=user_email,
            value=value,
        )
        RATINGS_SET_TOTAL.labels(subject_type=subject.subject_type).inc()
        logger.info(f"Calificación {value} de {user_email} para {subject.subject_type}:{subject.subject_id}")
        return rating.value

    @staticmethod
    def rate(db: Session, course_id: int, ctx: Optional[SessionContext], value: float,
             video_id: Optional[str] = None) -> float:
        """Califica aplicando primero la política de participación."""
        ctx = require_context(ctx)
        if not RatingService.can_rate(db, course_id, ctx):
            raise EligibilityError("No puedes calificar este curso")

        if video_id is not None:
            video = crud_course.get_video(db, video_id)
            if video is None or video.course_id != course_id:
                raise EligibilityError("El video no pertenece a este curso")
            subject = RatingSubject.video(course_id, video_id)
        else:
            subject = RatingSubject.course(course_id)
        return RatingService.set_rating(db, subject, ctx.email, value)

    # ── Elegibilidad ──

    @staticmethod
    def can_rate(db: Session, course_id: int, ctx: Optional[SessionContext]) -> bool:
        if ctx is None:
            return False
        course = crud_course.get_course(db, course_id)
        enrolled = course is not None and crud_course.get_enrollment(db, ctx.email, course_id) is not None
        return participation_allowed(course, ctx, enrolled)

    # ── Lecturas ──

    @staticmethod
    def get_user_rating(db: Session, subject: RatingSubject, user_email: str) -> float:
        """Valor de la calificación del usuario o 0 si no existe."""
        try:
            rating = crud_rating.get_rating(db, subject.subject_type, subject.subject_id, user_email)
        except StoreError as e:
            logger.warning(f"No se pudo leer la calificación: {e.message}")
            return 0.0
        return rating.value if rating else 0.0

    @staticmethod
    def _values(db: Session, subject: RatingSubject):
        try:
            return crud_rating.get_subject_values(db, subject.subject_type, subject.subject_id)
        except StoreError as e:
            logger.warning(f"No se pudieron leer las calificaciones: {e.message}")
            return []

    @staticmethod
    def average_rating(db: Session, subject: RatingSubject) -> float:
        return mean(RatingService._values(db, subject))

    @staticmethod
    def rating_count(db: Session, subject: RatingSubject) -> int:
        return len(RatingService._values(db, subject))

    @staticmethod
    def rating_stats(db: Session, subject: RatingSubject) -> RatingStats:
        values = RatingService._values(db, subject)
        return RatingStats(
            average=mean(values),
            count=len(values),
            distribution=rating_distribution(values),
        )
