# coursehub/api/v1/endpoints/comments.py
from typing import List, Literal

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext
from coursehub.core.deps import get_session_context
from coursehub.db.session import get_db
from coursehub.schemas.comment import Comment, CommentCreate, CommentReply, LikeResult
from coursehub.services.comment_service import CommentService

router = APIRouter()


@router.get("/courses/{course_id}/comments", response_model=List[Comment], summary="Comentarios del curso")
def read_comments(
    course_id: int,
    sort: Literal["newest", "oldest", "popular"] = "newest",
    db: Session = Depends(get_db),
):
    return CommentService.list_comments(db, course_id, sort=sort)


@router.post("/courses/{course_id}/comments", response_model=Comment,
             status_code=status.HTTP_201_CREATED, summary="Publicar comentario")
def post_comment(
    course_id: int,
    payload: CommentCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return CommentService.post_comment(db, course_id, ctx, payload.content)


@router.put("/comments/{comment_id}", response_model=Comment, summary="Editar mi comentario")
def edit_comment(
    comment_id: str,
    payload: CommentCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return CommentService.edit_comment(db, comment_id, ctx, payload.content)


@router.delete("/comments/{comment_id}", summary="Eliminar mi comentario")
def delete_comment(
    comment_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    CommentService.delete_comment(db, comment_id, ctx)
    return {"message": "Comentario eliminado", "comment_id": comment_id}


@router.post("/comments/{comment_id}/like", response_model=LikeResult, summary="Alternar like")
def like_comment(
    comment_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    liked, likes = CommentService.like_comment(db, comment_id, ctx.email)
    return {"comment_id": comment_id, "liked": liked, "likes": likes}


@router.post("/comments/{comment_id}/replies", response_model=CommentReply,
             status_code=status.HTTP_201_CREATED, summary="Responder comentario")
def reply_to_comment(
    comment_id: str,
    payload: CommentCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return CommentService.reply_to_comment(db, comment_id, ctx, payload.content)
