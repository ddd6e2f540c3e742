from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursehub.models.video_progress import VideoProgress
from decorators.store_logging import store_operation


def _triple_query(db: Session, user_email: str, course_id: int, video_id: str):
    return db.query(VideoProgress).filter(
        and_(
            VideoProgress.user_email == user_email,
            VideoProgress.course_id == course_id,
            VideoProgress.video_id == video_id,
        )
    )


def _apply_position(progress: VideoProgress, time_position: float, duration: float,
                    percentage: float) -> None:
    progress.time_position = time_position
    progress.duration = duration
    progress.percentage = percentage
    progress.last_updated = datetime.now(timezone.utc)


@store_operation("select", "video_progress")
def get_progress(db: Session, user_email: str, course_id: int, video_id: str) -> Optional[VideoProgress]:
    return _triple_query(db, user_email, course_id, video_id).first()


@store_operation("select", "video_progress")
def get_course_progress_rows(db: Session, user_email: str, course_id: int) -> List[VideoProgress]:
    return db.query(VideoProgress).filter(
        and_(
            VideoProgress.user_email == user_email,
            VideoProgress.course_id == course_id,
        )
    ).all()


@store_operation("upsert", "video_progress")
def upsert_progress(
    db: Session,
    user_email: str,
    course_id: int,
    video_id: str,
    time_position: float,
    duration: float,
    percentage: float,
) -> VideoProgress:
    """
    Crea o actualiza el registro de la tripleta (usuario, curso, video).

    Si otra sesión inserta la misma tripleta entre la consulta y el INSERT,
    se vuelve a leer la fila y se actualiza: gana la última escritura.
    """
    progress = _triple_query(db, user_email, course_id, video_id).first()

    if progress:
        _apply_position(progress, time_position, duration, percentage)
        db.commit()
    else:
        progress = VideoProgress(
            user_email=user_email,
            course_id=course_id,
            video_id=video_id,
            time_position=time_position,
            duration=duration,
            percentage=percentage,
        )
        db.add(progress)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            progress = _triple_query(db, user_email, course_id, video_id).first()
            if progress is None:
                raise
            _apply_position(progress, time_position, duration, percentage)
            db.commit()

    db.refresh(progress)
    return progress
