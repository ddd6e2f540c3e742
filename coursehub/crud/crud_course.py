from typing import Dict, Iterable, List, Optional

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session

from coursehub.models.course import Course, Enrollment, Video
from coursehub.models.comment import Comment
from coursehub.models.rating import Rating
from coursehub.models.review import Review
from coursehub.models.video_progress import VideoProgress
from decorators.store_logging import store_operation


# --- Cursos ---

@store_operation("select", "courses")
def get_course(db: Session, course_id: int) -> Optional[Course]:
    """
    Obtiene un curso por su ID.
    """
    return db.query(Course).filter(Course.id == course_id).first()


@store_operation("select", "courses")
def get_courses(
    db: Session,
    published_only: bool = False,
    creator_email: Optional[str] = None,
    course_ids: Optional[Iterable[int]] = None,
) -> List[Course]:
    """
    Lista cursos del más reciente al más antiguo.
    """
    query = db.query(Course)
    if published_only:
        query = query.filter(Course.published == True)  # noqa: E712
    if creator_email:
        query = query.filter(Course.creator_email == creator_email)
    if course_ids is not None:
        ids = list(course_ids)
        if not ids:
            return []
        query = query.filter(Course.id.in_(ids))
    return query.order_by(desc(Course.created_at), desc(Course.id)).all()


@store_operation("select", "courses")
def search_courses(db: Session, search_term: str, published_only: bool = True) -> List[Course]:
    """
    Búsqueda insensible a mayúsculas en título, descripción, categoría e instructor.
    """
    search = f"%{search_term}%"
    query = db.query(Course).filter(
        or_(
            Course.title.ilike(search),
            Course.description.ilike(search),
            Course.category.ilike(search),
            Course.creator_name.ilike(search),
        )
    )
    if published_only:
        query = query.filter(Course.published == True)  # noqa: E712
    return query.order_by(desc(Course.created_at), desc(Course.id)).all()


@store_operation("select", "courses")
def get_categories(db: Session) -> List[str]:
    rows = (
        db.query(Course.category)
        .filter(Course.published == True)  # noqa: E712
        .distinct()
        .order_by(Course.category)
        .all()
    )
    return [row[0] for row in rows]


@store_operation("insert", "courses")
def create_course(db: Session, **fields) -> Course:
    db_course = Course(**fields)
    db.add(db_course)
    db.commit()
    db.refresh(db_course)
    return db_course


@store_operation("update", "courses")
def update_course(db: Session, db_course: Course, **fields) -> Course:
    for field, value in fields.items():
        setattr(db_course, field, value)
    db.add(db_course)
    db.commit()
    db.refresh(db_course)
    return db_course


@store_operation("delete", "courses")
def delete_course(db: Session, db_course: Course) -> Course:
    """
    Elimina el curso y todo lo que cuelga de él (videos, inscripciones,
    progreso, calificaciones, reseñas y comentarios).
    """
    course_id = db_course.id
    db.query(Enrollment).filter(Enrollment.course_id == course_id).delete(synchronize_session=False)
    db.query(VideoProgress).filter(VideoProgress.course_id == course_id).delete(synchronize_session=False)
    db.query(Rating).filter(Rating.course_id == course_id).delete(synchronize_session=False)
    for review in db.query(Review).filter(Review.course_id == course_id).all():
        db.delete(review)
    for comment in db.query(Comment).filter(Comment.course_id == course_id).all():
        db.delete(comment)
    db.delete(db_course)
    db.commit()
    return db_course


# --- Videos ---

@store_operation("select", "videos")
def get_video(db: Session, video_id: str) -> Optional[Video]:
    return db.query(Video).filter(Video.id == video_id).first()


@store_operation("select", "videos")
def get_videos(db: Session, course_id: int) -> List[Video]:
    """
    Videos del curso ordenados por position.
    """
    return (
        db.query(Video)
        .filter(Video.course_id == course_id)
        .order_by(Video.position)
        .all()
    )


@store_operation("select", "videos")
def count_videos(db: Session, course_id: int) -> int:
    return db.query(func.count(Video.id)).filter(Video.course_id == course_id).scalar() or 0


@store_operation("insert", "videos")
def add_video(db: Session, course_id: int, **fields) -> Video:
    """
    Agrega un video al final de la lista del curso.
    """
    position = db.query(func.count(Video.id)).filter(Video.course_id == course_id).scalar() or 0
    db_video = Video(course_id=course_id, position=position, **fields)
    db.add(db_video)
    db.commit()
    db.refresh(db_video)
    return db_video


@store_operation("update", "videos")
def replace_videos(db: Session, course_id: int, videos: List[Dict]) -> List[Video]:
    """
    Reemplaza la lista de videos del curso conservando los IDs recibidos
    y renumerando position en el orden dado.
    """
    for db_video in db.query(Video).filter(Video.course_id == course_id).all():
        db.delete(db_video)
    db.flush()
    # Colecciones Course.videos ya cargadas apuntan a filas borradas
    db.expire_all()
    for index, data in enumerate(videos):
        db.add(Video(course_id=course_id, position=index, **data))
    db.commit()
    return get_videos(db, course_id)


@store_operation("delete", "videos")
def delete_video(db: Session, db_video: Video) -> Video:
    """
    Elimina el video y compacta las posiciones restantes.
    """
    course_id = db_video.course_id
    db.delete(db_video)
    db.flush()
    remaining = (
        db.query(Video)
        .filter(Video.course_id == course_id)
        .order_by(Video.position)
        .all()
    )
    for index, video in enumerate(remaining):
        video.position = index
    db.commit()
    return db_video


# --- Inscripciones ---

@store_operation("select", "enrollments")
def get_enrollment(db: Session, user_email: str, course_id: int) -> Optional[Enrollment]:
    return (
        db.query(Enrollment)
        .filter(Enrollment.user_email == user_email, Enrollment.course_id == course_id)
        .first()
    )


@store_operation("insert", "enrollments")
def create_enrollment(db: Session, user_email: str, course_id: int) -> Enrollment:
    """
    Inserta la inscripción. Una inscripción duplicada se reporta como ConflictError.
    """
    db_enrollment = Enrollment(user_email=user_email, course_id=course_id)
    db.add(db_enrollment)
    db.commit()
    db.refresh(db_enrollment)
    return db_enrollment


@store_operation("delete", "enrollments")
def delete_enrollment(db: Session, user_email: str, course_id: int) -> int:
    deleted = (
        db.query(Enrollment)
        .filter(Enrollment.user_email == user_email, Enrollment.course_id == course_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


@store_operation("select", "enrollments")
def get_enrolled_course_ids(db: Session, user_email: str) -> List[int]:
    rows = db.query(Enrollment.course_id).filter(Enrollment.user_email == user_email).all()
    return [row[0] for row in rows]


@store_operation("select", "enrollments")
def count_enrollments(db: Session, course_id: Optional[int] = None) -> int:
    query = db.query(func.count(Enrollment.id))
    if course_id is not None:
        query = query.filter(Enrollment.course_id == course_id)
    return query.scalar() or 0
