# coursehub/api/v1/endpoints/reviews.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext
from coursehub.core.deps import get_session_context
from coursehub.db.session import get_db
from coursehub.schemas.review import (
    HelpfulVote, HelpfulVoteResult, ReplyCreate, Review, ReviewCreate, ReviewEligibility,
    ReviewReply, ReviewStats, ReviewUpdate,
)
from coursehub.services.rating_service import RatingService, RatingSubject
from coursehub.services.review_service import ReviewService

router = APIRouter()


@router.get("/courses/{course_id}/reviews", response_model=List[Review], summary="Reseñas del curso")
def read_reviews(
    course_id: int,
    star: Optional[int] = Query(None, ge=1, le=5),
    db: Session = Depends(get_db),
):
    return ReviewService.list_reviews(db, course_id, star_filter=star)


@router.get("/courses/{course_id}/reviews/stats", response_model=ReviewStats,
            summary="Total, promedio y distribución de las reseñas")
def read_review_stats(course_id: int, db: Session = Depends(get_db)):
    return ReviewStats.model_validate(ReviewService.review_stats(db, course_id))


@router.get("/courses/{course_id}/reviews/eligibility", response_model=ReviewEligibility,
            summary="¿Puedo escribir una reseña?")
def read_review_eligibility(
    course_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    rating = RatingService.get_user_rating(db, RatingSubject.course(course_id), ctx.email)
    return {
        "can_write_review": ReviewService.can_write_review(db, course_id, ctx),
        "has_rating": bool(rating),
    }


@router.post("/courses/{course_id}/reviews", response_model=Review,
             status_code=status.HTTP_201_CREATED, summary="Publicar reseña")
def submit_review(
    course_id: int,
    payload: ReviewCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return ReviewService.submit_review(db, course_id, ctx, payload.content)


@router.put("/reviews/{review_id}", response_model=Review, summary="Editar mi reseña")
def edit_review(
    review_id: str,
    payload: ReviewUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return ReviewService.edit_review(db, review_id, ctx, payload.content)


@router.delete("/reviews/{review_id}", summary="Eliminar mi reseña")
def delete_review(
    review_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    ReviewService.delete_review(db, review_id, ctx)
    return {"message": "Reseña eliminada", "review_id": review_id}


@router.post("/reviews/{review_id}/helpful", response_model=HelpfulVoteResult,
             summary="Votar utilidad de la reseña")
def mark_helpful(
    review_id: str,
    payload: HelpfulVote,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    review, user_vote = ReviewService.mark_helpful(db, review_id, ctx.email, payload.vote)
    return {
        "review_id": review.review_id,
        "helpful_up": review.helpful_up,
        "helpful_down": review.helpful_down,
        "user_vote": user_vote,
    }


@router.post("/reviews/{review_id}/replies", response_model=ReviewReply,
             status_code=status.HTTP_201_CREATED, summary="Responder reseña (profesores)")
def reply_to_review(
    review_id: str,
    payload: ReplyCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return ReviewService.reply_to_review(db, review_id, ctx, payload.content)
