from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from coursehub.models.review import Review, ReviewHelpfulVote, ReviewReply
from decorators.store_logging import store_operation


@store_operation("select", "reviews")
def get_review(db: Session, review_id: str) -> Optional[Review]:
    return db.query(Review).filter(Review.review_id == review_id).first()


@store_operation("select", "reviews")
def get_user_review(db: Session, course_id: int, user_email: str) -> Optional[Review]:
    return db.query(Review).filter(
        Review.course_id == course_id,
        Review.user_email == user_email,
    ).first()


@store_operation("select", "reviews")
def get_reviews(db: Session, course_id: int, star: Optional[int] = None) -> List[Review]:
    """
    Reseñas del curso, más recientes primero, con filtro opcional por estrellas.
    """
    query = db.query(Review).filter(Review.course_id == course_id)
    if star is not None:
        query = query.filter(Review.rating == star)
    return query.order_by(desc(Review.created_at), desc(Review.id)).all()


@store_operation("insert", "reviews")
def create_review(db: Session, **fields) -> Review:
    db_review = Review(helpful_up=0, helpful_down=0, edited=False, **fields)
    db.add(db_review)
    db.commit()
    db.refresh(db_review)
    return db_review


@store_operation("update", "reviews")
def update_review_content(db: Session, db_review: Review, content: str) -> Review:
    db_review.content = content
    db_review.edited = True
    db.add(db_review)
    db.commit()
    db.refresh(db_review)
    return db_review


@store_operation("delete", "reviews")
def delete_review(db: Session, db_review: Review) -> Review:
    """
    Elimina la reseña; las respuestas y votos se eliminan en cascada.
    """
    db.delete(db_review)
    db.commit()
    return db_review


@store_operation("select", "review_helpful_votes")
def get_vote(db: Session, review_id: str, user_email: str) -> Optional[ReviewHelpfulVote]:
    return db.query(ReviewHelpfulVote).filter(
        ReviewHelpfulVote.review_id == review_id,
        ReviewHelpfulVote.user_email == user_email,
    ).first()


@store_operation("update", "review_helpful_votes")
def apply_vote(db: Session, db_review: Review, user_email: str, new_vote: Optional[str]) -> Review:
    """
    Reemplaza el voto del usuario por new_vote (None lo elimina) y ajusta
    los contadores de la reseña en la misma transacción.
    """
    current = db.query(ReviewHelpfulVote).filter(
        ReviewHelpfulVote.review_id == db_review.review_id,
        ReviewHelpfulVote.user_email == user_email,
    ).first()

    if current is not None:
        if current.vote == "up":
            db_review.helpful_up = max(0, db_review.helpful_up - 1)
        else:
            db_review.helpful_down = max(0, db_review.helpful_down - 1)

    if new_vote is None:
        if current is not None:
            db.delete(current)
    else:
        if current is None:
            current = ReviewHelpfulVote(review_id=db_review.review_id, user_email=user_email)
            db.add(current)
        current.vote = new_vote
        if new_vote == "up":
            db_review.helpful_up += 1
        else:
            db_review.helpful_down += 1

    db.add(db_review)
    db.commit()
    db.refresh(db_review)
    return db_review


@store_operation("insert", "review_replies")
def create_reply(db: Session, **fields) -> ReviewReply:
    db_reply = ReviewReply(**fields)
    db.add(db_reply)
    db.commit()
    db.refresh(db_reply)
    return db_reply
