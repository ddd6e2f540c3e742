from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ProgressHeartbeat(BaseModel):
    """
    Evento del reproductor. 'tick' es el auto-guardado periódico; se ignora
    si paused es verdadero.
    """
    course_id: int
    video_id: str
    event: Literal["pause", "seek", "tick", "ended", "unload"] = "tick"
    current_time: float = Field(0.0, description="Posición actual en segundos")
    duration: float = Field(0.0, description="Duración total en segundos")
    paused: bool = False


class ProgressRecord(BaseModel):
    user_email: str
    course_id: int
    video_id: str
    time_position: float
    duration: float
    percentage: float
    is_complete: bool = False
    last_updated: Optional[datetime] = None

    class Config:
        from_attributes = True


class HeartbeatResult(BaseModel):
    saved: bool
    record: Optional[ProgressRecord] = None


class VideoProgressItem(BaseModel):
    video_id: str
    name: str
    position: int
    percentage: float
    is_complete: bool

    class Config:
        from_attributes = True


class CourseProgress(BaseModel):
    course_id: int
    progress: float
    is_completed: bool
    review_eligible: bool
    videos: List[VideoProgressItem] = []


class ResumePosition(BaseModel):
    course_id: int
    video_id: str
    time_position: float
