# coursehub/api/v1/endpoints/ratings.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext
from coursehub.core.deps import get_session_context
from coursehub.db.session import get_db
from coursehub.schemas.rating import RatingSet, RatingStats, UserRating
from coursehub.services.rating_service import RatingService, RatingSubject

router = APIRouter()


def _subject(course_id: int, video_id: Optional[str]) -> RatingSubject:
    if video_id:
        return RatingSubject.video(course_id, video_id)
    return RatingSubject.course(course_id)


@router.put("/{course_id}/rating", response_model=UserRating, summary="Calificar curso o video")
def set_rating(
    course_id: int,
    payload: RatingSet,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    value = RatingService.rate(db, course_id, ctx, payload.value, video_id=payload.video_id)
    return {"value": value, "can_rate": True}


@router.get("/{course_id}/rating", response_model=UserRating, summary="Mi calificación")
def read_my_rating(
    course_id: int,
    video_id: Optional[str] = None,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return {
        "value": RatingService.get_user_rating(db, _subject(course_id, video_id), ctx.email),
        "can_rate": RatingService.can_rate(db, course_id, ctx),
    }


@router.get("/{course_id}/rating/stats", response_model=RatingStats, summary="Promedio y distribución")
def read_rating_stats(
    course_id: int,
    video_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return RatingStats.model_validate(RatingService.rating_stats(db, _subject(course_id, video_id)))
