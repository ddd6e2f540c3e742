# coursehub/services/review_service.py
"""
Reseñas de curso: publicación, edición, votos de utilidad y respuestas de
profesores.

La estrella de una reseña es una foto de la calificación que el autor tenía
al publicarla; cambios posteriores a la calificación no la modifican.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext, require_context
from coursehub.core.exceptions import (
    EligibilityError, MissingRatingError, NotFoundError, StoreError, ValidationError
)
from coursehub.core.metrics import REVIEWS_SUBMITTED_TOTAL
from coursehub.crud import crud_course, crud_review
from coursehub.models.review import Review, ReviewReply
from coursehub.services.progress_tracker import ProgressTracker
from coursehub.services.rating_service import (
    RatingDistribution, RatingService, RatingSubject, mean, participation_allowed,
    rating_distribution, star_bin,
)
from coursehub.utils.formatting import generate_id, validate_text_length

logger = logging.getLogger("coursehub.reviews")

REVIEW_MIN_LENGTH = 10
REVIEW_MAX_LENGTH = 5000
REPLY_MIN_LENGTH = 5
HELPFUL_VOTES = ("up", "down")


@dataclass
class ReviewStats:
    total: int
    average: float
    distribution: RatingDistribution


def _validate_review_text(text: Optional[str]) -> str:
    return validate_text_length(text, REVIEW_MIN_LENGTH, REVIEW_MAX_LENGTH, label="La reseña")


class ReviewService:

    # ── Elegibilidad ──

    @staticmethod
    def can_write_review(db: Session, course_id: int, ctx: Optional[SessionContext]) -> bool:
        """
        Una reseña por usuario y curso. Aplica la misma política de
        participación que las calificaciones; los estudiantes además
        necesitan al menos 50% de avance en el curso.
        """
        if ctx is None:
            return False
        if crud_review.get_user_review(db, course_id, ctx.email) is not None:
            return False
        if not RatingService.can_rate(db, course_id, ctx):
            return False
        if ctx.is_student:
            return ProgressTracker(db).is_review_eligible(ctx.email, course_id)
        return True

    # ── Reseñas ──

    @staticmethod
    def submit_review(db: Session, course_id: int, ctx: Optional[SessionContext], text: str) -> Review:
        """
        Publica la reseña del usuario.

        Raises:
            ValidationError: texto fuera de 10-5000 caracteres
            EligibilityError: el usuario no puede reseñar este curso
            MissingRatingError: el usuario aún no califica el curso
        """
        ctx = require_context(ctx)
        content = _validate_review_text(text)

        if not ReviewService.can_write_review(db, course_id, ctx):
            raise EligibilityError("No puedes escribir una reseña para este curso")

        rating = RatingService.get_user_rating(db, RatingSubject.course(course_id), ctx.email)
        if not rating:
            raise MissingRatingError("Califica el curso antes de escribir tu reseña")

        review = crud_review.create_review(
            db,
            review_id=generate_id("rev"),
            course_id=course_id,
            user_email=ctx.email,
            user_name=ctx.display_name,
            user_initials=ctx.initials,
            user_type=ctx.user_type,
            content=content,
            rating=star_bin(rating),
        )
        REVIEWS_SUBMITTED_TOTAL.inc()
        logger.info(f"Reseña {review.review_id} publicada por {ctx.email} en curso {course_id}")
        return review

    @staticmethod
    def _get_own_review(db: Session, review_id: str, ctx: SessionContext) -> Review:
        review = crud_review.get_review(db, review_id)
        if review is None:
            raise NotFoundError("Reseña no encontrada")
        if review.user_email != ctx.email:
            raise EligibilityError("Solo el autor puede modificar esta reseña")
        return review

    @staticmethod
    def edit_review(db: Session, review_id: str, ctx: Optional[SessionContext], text: str) -> Review:
        ctx = require_context(ctx)
        content = _validate_review_text(text)
        review = ReviewService._get_own_review(db, review_id, ctx)
        return crud_review.update_review_content(db, review, content)

    @staticmethod
    def delete_review(db: Session, review_id: str, ctx: Optional[SessionContext]) -> Review:
        ctx = require_context(ctx)
        review = ReviewService._get_own_review(db, review_id, ctx)
        logger.info(f"Reseña {review_id} eliminada por {ctx.email}")
        return crud_review.delete_review(db, review)

    # ── Votos de utilidad ──

    @staticmethod
    def get_user_vote(db: Session, review_id: str, user_email: str) -> Optional[str]:
        try:
            vote = crud_review.get_vote(db, review_id, user_email)
        except StoreError as e:
            logger.warning(f"No se pudo leer el voto: {e.message}")
            return None
        return vote.vote if vote else None

    @staticmethod
    def mark_helpful(db: Session, review_id: str, user_email: str, vote: str) -> Tuple[Review, Optional[str]]:
        """
        Voto tri-estado: repetir el mismo voto lo quita; cambiarlo mueve un
        punto de un contador al otro. Devuelve la reseña y el voto vigente.
        """
        if vote not in HELPFUL_VOTES:
            raise ValidationError("El voto debe ser 'up' o 'down'")

        review = crud_review.get_review(db, review_id)
        if review is None:
            raise NotFoundError("Reseña no encontrada")

        current = crud_review.get_vote(db, review_id, user_email)
        new_vote = None if current is not None and current.vote == vote else vote
        review = crud_review.apply_vote(db, review, user_email, new_vote)
        return review, new_vote

    # ── Respuestas ──

    @staticmethod
    def reply_to_review(db: Session, review_id: str, ctx: Optional[SessionContext], text: str) -> ReviewReply:
        """Solo profesores que no sean autores de la reseña."""
        ctx = require_context(ctx)
        review = crud_review.get_review(db, review_id)
        if review is None:
            raise NotFoundError("Reseña no encontrada")
        if not ctx.is_teacher:
            raise EligibilityError("Solo los profesores pueden responder reseñas")
        if review.user_email == ctx.email:
            raise EligibilityError("No puedes responder tu propia reseña")

        content = validate_text_length(text, REPLY_MIN_LENGTH, label="La respuesta")
        return crud_review.create_reply(
            db,
            reply_id=generate_id("reply"),
            review_id=review_id,
            user_email=ctx.email,
            user_name=ctx.display_name,
            user_initials=ctx.initials,
            content=content,
        )

    # ── Listados ──

    @staticmethod
    def list_reviews(db: Session, course_id: int, star_filter: Optional[int] = None) -> List[Review]:
        """Más recientes primero; star_filter filtra por estrella exacta."""
        if star_filter is not None and star_filter not in range(1, 6):
            raise ValidationError("El filtro de estrellas debe estar entre 1 y 5")
        try:
            return crud_review.get_reviews(db, course_id, star=star_filter)
        except StoreError as e:
            logger.warning(f"No se pudieron leer las reseñas del curso {course_id}: {e.message}")
            return []

    @staticmethod
    def review_stats(db: Session, course_id: int) -> ReviewStats:
        stars = [review.rating for review in ReviewService.list_reviews(db, course_id)]
        return ReviewStats(
            total=len(stars),
            average=mean(stars),
            distribution=rating_distribution(stars),
        )


class ReviewDisplayState(str, Enum):
    CONTENT_VISIBLE = "content-visible"
    EDIT_MODE = "edit-mode"


class ReviewEditSession:
    """
    Estado de visualización de una reseña para su autor:
    content-visible <-> edit-mode. Guardar valida antes de persistir;
    cancelar descarta el borrador.
    """

    def __init__(self, db: Session, review: Review, ctx: Optional[SessionContext]):
        self.db = db
        self.review = review
        self.ctx = require_context(ctx)
        self.state = ReviewDisplayState.CONTENT_VISIBLE
        self.buffer: Optional[str] = None

    def start_edit(self) -> str:
        if self.review.user_email != self.ctx.email:
            raise EligibilityError("Solo el autor puede editar esta reseña")
        self.state = ReviewDisplayState.EDIT_MODE
        self.buffer = self.review.content
        return self.buffer

    def update_buffer(self, text: str) -> None:
        if self.state != ReviewDisplayState.EDIT_MODE:
            raise EligibilityError("La reseña no está en modo edición")
        self.buffer = text

    def save(self) -> Review:
        """
        Persiste el borrador. Si no pasa la validación se queda en modo
        edición con el borrador intacto.
        """
        if self.state != ReviewDisplayState.EDIT_MODE:
            raise EligibilityError("La reseña no está en modo edición")
        self.review = ReviewService.edit_review(self.db, self.review.review_id, self.ctx, self.buffer)
        self.state = ReviewDisplayState.CONTENT_VISIBLE
        self.buffer = None
        return self.review

    def cancel(self) -> None:
        self.state = ReviewDisplayState.CONTENT_VISIBLE
        self.buffer = None
