from typing import List, Optional

from sqlalchemy.orm import Session

from coursehub.models.comment import Comment, CommentLike, CommentReply
from decorators.store_logging import store_operation


@store_operation("select", "comments")
def get_comment(db: Session, comment_id: str) -> Optional[Comment]:
    return db.query(Comment).filter(Comment.comment_id == comment_id).first()


@store_operation("select", "comments")
def get_comments(db: Session, course_id: int) -> List[Comment]:
    """
    Comentarios del curso en orden de inserción; el servicio aplica el orden pedido.
    """
    return (
        db.query(Comment)
        .filter(Comment.course_id == course_id)
        .order_by(Comment.id)
        .all()
    )


@store_operation("insert", "comments")
def create_comment(db: Session, **fields) -> Comment:
    db_comment = Comment(likes=0, edited=False, **fields)
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return db_comment


@store_operation("update", "comments")
def update_comment_content(db: Session, db_comment: Comment, content: str) -> Comment:
    db_comment.content = content
    db_comment.edited = True
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return db_comment


@store_operation("delete", "comments")
def delete_comment(db: Session, db_comment: Comment) -> Comment:
    """
    Elimina el comentario; respuestas y likes se eliminan en cascada.
    """
    db.delete(db_comment)
    db.commit()
    return db_comment


@store_operation("select", "comment_likes")
def get_like(db: Session, comment_id: str, user_email: str) -> Optional[CommentLike]:
    return db.query(CommentLike).filter(
        CommentLike.comment_id == comment_id,
        CommentLike.user_email == user_email,
    ).first()


@store_operation("update", "comment_likes")
def toggle_like(db: Session, db_comment: Comment, user_email: str) -> bool:
    """
    Alterna el like del usuario. Devuelve True si quedó marcado.
    """
    existing = db.query(CommentLike).filter(
        CommentLike.comment_id == db_comment.comment_id,
        CommentLike.user_email == user_email,
    ).first()

    if existing is not None:
        db.delete(existing)
        db_comment.likes = max(0, db_comment.likes - 1)
        liked = False
    else:
        db.add(CommentLike(comment_id=db_comment.comment_id, user_email=user_email))
        db_comment.likes += 1
        liked = True

    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return liked


@store_operation("insert", "comment_replies")
def create_reply(db: Session, **fields) -> CommentReply:
    db_reply = CommentReply(**fields)
    db.add(db_reply)
    db.commit()
    db.refresh(db_reply)
    return db_reply
