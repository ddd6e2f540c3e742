# coursehub/api/v1/endpoints/progress.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext
from coursehub.core.deps import get_session_context
from coursehub.db.session import get_db
from coursehub.schemas.progress import (
    CourseProgress, HeartbeatResult, ProgressHeartbeat, ProgressRecord, ResumePosition,
    VideoProgressItem,
)
from coursehub.services.progress_tracker import ProgressTracker

router = APIRouter()


@router.post("/heartbeat", response_model=HeartbeatResult,
             summary="Evento del reproductor (pausa, búsqueda, auto-guardado, fin, cierre)")
def progress_heartbeat(
    payload: ProgressHeartbeat,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """
    Guarda la posición de reproducción. Los errores del almacén no se
    reportan al cliente: el guardado es best-effort.
    """
    record = ProgressTracker(db).apply_event(
        ctx.email,
        payload.course_id,
        payload.video_id,
        payload.event,
        payload.current_time,
        payload.duration,
        paused=payload.paused,
    )
    return HeartbeatResult(
        saved=record is not None,
        record=ProgressRecord.model_validate(record) if record is not None else None,
    )


@router.get("/{course_id}", response_model=CourseProgress, summary="Progreso del curso")
def read_course_progress(
    course_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    tracker = ProgressTracker(db)
    progress = tracker.get_course_progress(ctx.email, course_id)
    return {
        "course_id": course_id,
        "progress": progress,
        "is_completed": tracker.is_course_completed(ctx.email, course_id),
        "review_eligible": tracker.is_review_eligible(ctx.email, course_id),
        "videos": [
            VideoProgressItem.model_validate(item)
            for item in tracker.video_progress_list(ctx.email, course_id)
        ],
    }


@router.get("/{course_id}/{video_id}", response_model=ProgressRecord, summary="Progreso de un video")
def read_video_progress(
    course_id: int,
    video_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return ProgressRecord.model_validate(ProgressTracker(db).get_progress(ctx.email, course_id, video_id))


@router.get("/{course_id}/{video_id}/resume", response_model=ResumePosition,
            summary="Posición desde la que se reanuda el video")
def read_resume_position(
    course_id: int,
    video_id: str,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return {
        "course_id": course_id,
        "video_id": video_id,
        "time_position": ProgressTracker(db).resume(ctx.email, course_id, video_id),
    }
