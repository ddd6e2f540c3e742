# coursehub/services/comment_service.py
"""
Hilos de comentarios por curso. Likes booleanos por usuario y respuestas
abiertas a cualquier usuario autenticado.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext, require_context
from coursehub.core.exceptions import EligibilityError, NotFoundError, StoreError, ValidationError
from coursehub.core.metrics import COMMENTS_POSTED_TOTAL
from coursehub.crud import crud_comment, crud_course
from coursehub.models.comment import Comment, CommentReply
from coursehub.utils.formatting import generate_id, validate_text_length

logger = logging.getLogger("coursehub.comments")

COMMENT_MIN_LENGTH = 3
COMMENT_MAX_LENGTH = 2000
SORT_ORDERS = ("newest", "oldest", "popular")


class CommentService:

    @staticmethod
    def post_comment(db: Session, course_id: int, ctx: Optional[SessionContext], text: str) -> Comment:
        ctx = require_context(ctx)
        content = validate_text_length(text, COMMENT_MIN_LENGTH, COMMENT_MAX_LENGTH, label="El comentario")
        if crud_course.get_course(db, course_id) is None:
            raise NotFoundError("Curso no encontrado")

        comment = crud_comment.create_comment(
            db,
            comment_id=generate_id("comment"),
            course_id=course_id,
            user_email=ctx.email,
            user_name=ctx.display_name,
            user_initials=ctx.initials,
            user_type=ctx.user_type,
            content=content,
        )
        COMMENTS_POSTED_TOTAL.inc()
        return comment

    @staticmethod
    def _get_own_comment(db: Session, comment_id: str, ctx: SessionContext) -> Comment:
        comment = crud_comment.get_comment(db, comment_id)
        if comment is None:
            raise NotFoundError("Comentario no encontrado")
        if comment.user_email != ctx.email:
            raise EligibilityError("Solo el autor puede modificar este comentario")
        return comment

    @staticmethod
    def edit_comment(db: Session, comment_id: str, ctx: Optional[SessionContext], text: str) -> Comment:
        ctx = require_context(ctx)
        content = validate_text_length(text, COMMENT_MIN_LENGTH, COMMENT_MAX_LENGTH, label="El comentario")
        comment = CommentService._get_own_comment(db, comment_id, ctx)
        return crud_comment.update_comment_content(db, comment, content)

    @staticmethod
    def delete_comment(db: Session, comment_id: str, ctx: Optional[SessionContext]) -> Comment:
        ctx = require_context(ctx)
        comment = CommentService._get_own_comment(db, comment_id, ctx)
        logger.info(f"Comentario {comment_id} eliminado por {ctx.email}")
        return crud_comment.delete_comment(db, comment)

    @staticmethod
    def like_comment(db: Session, comment_id: str, user_email: str) -> Tuple[bool, int]:
        """Alterna el like. Devuelve (liked, total de likes)."""
        comment = crud_comment.get_comment(db, comment_id)
        if comment is None:
            raise NotFoundError("Comentario no encontrado")
        liked = crud_comment.toggle_like(db, comment, user_email)
        return liked, comment.likes

    @staticmethod
    def has_liked(db: Session, comment_id: str, user_email: str) -> bool:
        try:
            return crud_comment.get_like(db, comment_id, user_email) is not None
        except StoreError as e:
            logger.warning(f"No se pudo leer el like: {e.message}")
            return False

    @staticmethod
    def reply_to_comment(db: Session, comment_id: str, ctx: Optional[SessionContext], text: str) -> CommentReply:
        ctx = require_context(ctx)
        content = validate_text_length(text, COMMENT_MIN_LENGTH, COMMENT_MAX_LENGTH, label="La respuesta")
        if crud_comment.get_comment(db, comment_id) is None:
            raise NotFoundError("Comentario no encontrado")
        return crud_comment.create_reply(
            db,
            reply_id=generate_id("reply"),
            comment_id=comment_id,
            user_email=ctx.email,
            user_name=ctx.display_name,
            user_initials=ctx.initials,
            content=content,
        )

    @staticmethod
    def list_comments(db: Session, course_id: int, sort: str = "newest") -> List[Comment]:
        """
        newest: más recientes primero; oldest: orden de creación;
        popular: más likes primero, empates en orden de creación.
        """
        if sort not in SORT_ORDERS:
            raise ValidationError(f"Orden no soportado: {sort}")
        try:
            comments = crud_comment.get_comments(db, course_id)
        except StoreError as e:
            logger.warning(f"No se pudieron leer los comentarios del curso {course_id}: {e.message}")
            return []

        if sort == "newest":
            return list(reversed(comments))
        if sort == "popular":
            return sorted(comments, key=lambda comment: comment.likes, reverse=True)
        return comments
