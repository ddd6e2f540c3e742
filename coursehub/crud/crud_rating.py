from typing import List, Optional

from sqlalchemy.orm import Session

from coursehub.models.rating import Rating
from decorators.store_logging import store_operation


@store_operation("select", "ratings")
def get_rating(db: Session, subject_type: str, subject_id: str, user_email: str) -> Optional[Rating]:
    return db.query(Rating).filter(
        Rating.subject_type == subject_type,
        Rating.subject_id == subject_id,
        Rating.user_email == user_email,
    ).first()


@store_operation("select", "ratings")
def get_subject_values(db: Session, subject_type: str, subject_id: str) -> List[float]:
    """
    Todos los valores de calificación de un sujeto, en orden de creación.
    """
    rows = (
        db.query(Rating.value)
        .filter(Rating.subject_type == subject_type, Rating.subject_id == subject_id)
        .order_by(Rating.id)
        .all()
    )
    return [row[0] for row in rows]


@store_operation("upsert", "ratings")
def upsert_rating(
    db: Session,
    subject_type: str,
    subject_id: str,
    course_id: int,
    user_email: str,
    value: float,
) -> Rating:
    """
    Una calificación por usuario y sujeto; la última escritura gana.
    """
    rating = db.query(Rating).filter(
        Rating.subject_type == subject_type,
        Rating.subject_id == subject_id,
        Rating.user_email == user_email,
    ).first()

    if rating:
        rating.value = value
    else:
        rating = Rating(
            subject_type=subject_type,
            subject_id=subject_id,
            course_id=course_id,
            user_email=user_email,
            value=value,
        )
        db.add(rating)

    db.commit()
    db.refresh(rating)
    return rating
