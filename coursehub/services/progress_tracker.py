# coursehub/services/progress_tracker.py
"""
Seguimiento del progreso de reproducción de videos.

Cada (usuario, curso, video) tiene a lo sumo un registro con la última
posición guardada. Las escrituras son fire-and-forget: si el almacén falla se
registra el error y se devuelve el registro calculado en memoria, sin
reintentos. La pérdida de un guardado es un riesgo aceptado.
"""
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from coursehub.core.config import settings
from coursehub.core.exceptions import CourseHubError, NotFoundError, StoreError
from coursehub.core.logging_config import get_service_logger
from coursehub.core.metrics import PROGRESS_SAVES_TOTAL
from coursehub.crud import crud_course, crud_progress
from coursehub.utils.formatting import clamp

logger = get_service_logger("coursehub.progress", "progress")

# Configuración del módulo
AUTOSAVE_INTERVAL_SECONDS = settings.AUTOSAVE_INTERVAL_SECONDS
REVIEW_ELIGIBILITY_THRESHOLD = 50.0  # % del curso para poder reseñar
VIDEO_COMPLETION_THRESHOLD = 90.0  # % de un video para marcarlo como visto

PLAYBACK_EVENTS = ("pause", "seek", "tick", "ended", "unload")


def _finite(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def compute_percentage(current_time: float, duration: float) -> float:
    """
    current_time / duration * 100 acotado a [0, 100]; 0 si duration <= 0.
    """
    current_time = _finite(current_time)
    duration = _finite(duration)
    if duration <= 0:
        return 0.0
    return clamp(current_time / duration * 100, 0.0, 100.0)


def position_for_event(event: str, current_time: float, duration: float,
                       paused: bool = False) -> Optional[float]:
    """
    Posición que debe persistirse para un evento del reproductor, o None si el
    evento no genera guardado.

    - 'ended' fuerza la posición a la duración total.
    - 'tick' (auto-guardado periódico) se omite si el video está en pausa.
    - Ningún evento guarda una posición de 0: el registro nace en el primer
      avance real.
    """
    if event not in PLAYBACK_EVENTS:
        raise ValueError(f"Evento de reproducción desconocido: {event}")

    duration = max(0.0, _finite(duration))
    if event == "ended":
        return duration if duration > 0 else None
    if event == "tick" and paused:
        return None

    position = max(0.0, _finite(current_time))
    if position <= 0:
        return None
    return position


@dataclass
class ProgressRecord:
    user_email: str
    course_id: int
    video_id: str
    time_position: float = 0.0
    duration: float = 0.0
    percentage: float = 0.0
    last_updated: Optional[datetime] = None

    @classmethod
    def empty(cls, user_email: str, course_id: int, video_id: str) -> "ProgressRecord":
        return cls(user_email=user_email, course_id=course_id, video_id=video_id)

    @classmethod
    def from_model(cls, row) -> "ProgressRecord":
        return cls(
            user_email=row.user_email,
            course_id=row.course_id,
            video_id=row.video_id,
            time_position=row.time_position,
            duration=row.duration,
            percentage=row.percentage,
            last_updated=row.last_updated,
        )

    @property
    def is_complete(self) -> bool:
        return self.percentage >= VIDEO_COMPLETION_THRESHOLD


@dataclass
class VideoProgressItem:
    video_id: str
    name: str
    position: int
    percentage: float
    is_complete: bool


class ProgressTracker:
    """
    Registra y consulta el progreso de un usuario sobre los videos de un curso.
    """

    def __init__(self, db: Session):
        self.db = db

    def record_tick(self, user_email: str, course_id: int, video_id: str,
                    current_time: float, duration: float) -> ProgressRecord:
        """
        Upsert del registro. Nunca falla por errores del almacén.
        """
        position = max(0.0, _finite(current_time))
        duration = max(0.0, _finite(duration))
        record = ProgressRecord(
            user_email=user_email,
            course_id=course_id,
            video_id=video_id,
            time_position=position,
            duration=duration,
            percentage=compute_percentage(position, duration),
            last_updated=datetime.now(timezone.utc),
        )

        try:
            saved = crud_progress.upsert_progress(
                self.db,
                user_email=user_email,
                course_id=course_id,
                video_id=video_id,
                time_position=record.time_position,
                duration=record.duration,
                percentage=record.percentage,
            )
        except CourseHubError as e:
            PROGRESS_SAVES_TOTAL.labels(outcome="failed").inc()
            logger.error(
                f"Error guardando progreso: {e.message}",
                extra={"user_email": user_email, "course_id": course_id, "video_id": video_id},
            )
            return record

        PROGRESS_SAVES_TOTAL.labels(outcome="saved").inc()
        logger.info(
            f"Progreso guardado: user={user_email}, video={video_id}, "
            f"position={record.time_position:.1f}s, progress={record.percentage:.1f}%"
        )
        return ProgressRecord.from_model(saved)

    def get_progress(self, user_email: str, course_id: int, video_id: str) -> ProgressRecord:
        """
        Registro guardado o un registro en cero si no existe.
        """
        try:
            row = crud_progress.get_progress(self.db, user_email, course_id, video_id)
        except StoreError as e:
            logger.warning(f"No se pudo leer el progreso, se usa cero: {e.message}")
            row = None
        if row is None:
            return ProgressRecord.empty(user_email, course_id, video_id)
        return ProgressRecord.from_model(row)

    def resume(self, user_email: str, course_id: int, video_id: str) -> float:
        """
        Última posición guardada en segundos (0 si no hay). No reproduce nada:
        quien llama debe mover el reproductor a esta posición.
        """
        return self.get_progress(user_email, course_id, video_id).time_position

    def _course_videos(self, course_id: int):
        try:
            return crud_course.get_videos(self.db, course_id)
        except StoreError as e:
            logger.warning(f"No se pudieron leer los videos del curso {course_id}: {e.message}")
            return []

    def _percentages_by_video(self, user_email: str, course_id: int) -> dict:
        try:
            rows = crud_progress.get_course_progress_rows(self.db, user_email, course_id)
        except StoreError as e:
            logger.warning(f"No se pudo leer el progreso del curso {course_id}: {e.message}")
            rows = []
        return {row.video_id: row.percentage for row in rows}

    def get_course_progress(self, user_email: str, course_id: int) -> float:
        """
        Promedio de porcentaje sobre TODOS los videos del curso; los videos sin
        registro cuentan como 0. Un curso sin videos tiene progreso 0.
        """
        videos = self._course_videos(course_id)
        if not videos:
            return 0.0
        percentages = self._percentages_by_video(user_email, course_id)
        total = sum(percentages.get(video.id, 0.0) for video in videos)
        return clamp(total / len(videos), 0.0, 100.0)

    def video_progress_list(self, user_email: str, course_id: int) -> List[VideoProgressItem]:
        videos = self._course_videos(course_id)
        percentages = self._percentages_by_video(user_email, course_id)
        items = []
        for video in videos:
            percentage = percentages.get(video.id, 0.0)
            items.append(VideoProgressItem(
                video_id=video.id,
                name=video.name,
                position=video.position,
                percentage=percentage,
                is_complete=percentage >= VIDEO_COMPLETION_THRESHOLD,
            ))
        return items

    def is_course_completed(self, user_email: str, course_id: int) -> bool:
        return self.get_course_progress(user_email, course_id) >= VIDEO_COMPLETION_THRESHOLD

    def is_review_eligible(self, user_email: str, course_id: int) -> bool:
        return self.get_course_progress(user_email, course_id) >= REVIEW_ELIGIBILITY_THRESHOLD

    def apply_event(self, user_email: str, course_id: int, video_id: str, event: str,
                    current_time: float, duration: float,
                    paused: bool = False) -> Optional[ProgressRecord]:
        """
        Aplica un evento del reproductor (heartbeat). Devuelve el registro
        guardado o None si el evento no requería guardado.
        """
        position = position_for_event(event, current_time, duration, paused)
        if position is None:
            return None
        return self.record_tick(user_email, course_id, video_id, position, duration)


class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


@dataclass
class PlaylistEntry:
    video_id: str
    duration: float


class PlaybackSession:
    """
    Máquina de estados del reproductor de un curso para un usuario.

    Guarda en pausa, al buscar, al terminar el video y en cada disparo del
    temporizador si pasaron al menos `autosave_interval` segundos desde el
    último guardado y el video se está reproduciendo.
    """

    def __init__(
        self,
        tracker: ProgressTracker,
        user_email: str,
        course_id: int,
        playlist: Sequence[PlaylistEntry],
        clock: Callable[[], float] = time.monotonic,
        autosave_interval: float = AUTOSAVE_INTERVAL_SECONDS,
    ):
        self.tracker = tracker
        self.user_email = user_email
        self.course_id = course_id
        self.playlist = list(playlist)
        self.clock = clock
        self.autosave_interval = autosave_interval
        self.state = PlaybackState.IDLE
        self.current_index: Optional[int] = None
        self.position = 0.0
        self.timer_active = False
        self._last_save_at: Optional[float] = None

    @property
    def current(self) -> Optional[PlaylistEntry]:
        if self.current_index is None:
            return None
        return self.playlist[self.current_index]

    def _save(self, event: str, current_time: Optional[float] = None) -> Optional[ProgressRecord]:
        entry = self.current
        if entry is None:
            return None
        if current_time is not None:
            self.position = max(0.0, _finite(current_time))
        position = position_for_event(
            event, self.position, entry.duration, paused=self.state != PlaybackState.PLAYING
        )
        if position is None:
            return None
        self.position = position
        self._last_save_at = self.clock()
        return self.tracker.record_tick(
            self.user_email, self.course_id, entry.video_id, position, entry.duration
        )

    def load(self, index: int, duration: Optional[float] = None,
             current_time: Optional[float] = None) -> float:
        """
        Cambia de video guardando antes la posición del actual (current_time
        del reproductor si se conoce). Devuelve la posición en la que debe
        reanudarse el nuevo video.
        """
        if index < 0 or index >= len(self.playlist):
            raise NotFoundError(f"El curso no tiene un video en la posición {index}")

        self._save("seek", current_time)

        self.current_index = index
        if duration is not None and _finite(duration) > 0:
            self.playlist[index] = PlaylistEntry(self.playlist[index].video_id, _finite(duration))
        self.position = self.tracker.resume(self.user_email, self.course_id, self.current.video_id)
        self.state = PlaybackState.IDLE
        self.timer_active = True
        self._last_save_at = self.clock()
        return self.position

    def play(self) -> None:
        if self.current is None:
            raise NotFoundError("No hay video cargado")
        self.state = PlaybackState.PLAYING

    def pause(self, current_time: float) -> Optional[ProgressRecord]:
        self.state = PlaybackState.PAUSED
        return self._save("pause", current_time)

    def seek(self, current_time: float) -> Optional[ProgressRecord]:
        return self._save("seek", current_time)

    def timer_fired(self, current_time: float) -> Optional[ProgressRecord]:
        """
        Disparo del temporizador de auto-guardado. Se omite si el video no se
        está reproduciendo o si aún no pasa el intervalo.
        """
        if not self.timer_active or self.state != PlaybackState.PLAYING:
            return None
        self.position = max(0.0, _finite(current_time))
        if self._last_save_at is not None and self.clock() - self._last_save_at < self.autosave_interval:
            return None
        return self._save("tick")

    def end(self) -> Optional[int]:
        """
        Fin del video: guarda con posición = duración y devuelve el índice del
        siguiente video, o None si era el último.
        """
        self._save("ended")
        self.state = PlaybackState.ENDED
        if self.current_index is not None and self.current_index < len(self.playlist) - 1:
            return self.current_index + 1
        return None

    def unload(self, current_time: Optional[float] = None) -> Optional[ProgressRecord]:
        """
        Cierre de página: último guardado best-effort y baja del temporizador.
        """
        record = self._save("unload", current_time)
        self.timer_active = False
        self.state = PlaybackState.IDLE
        return record
