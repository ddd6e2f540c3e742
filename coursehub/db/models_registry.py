# coursehub/db/models_registry.py
# Este archivo importa todos los modelos para que Base.metadata los conozca
# antes de create_all o de una migración de Alembic.

from coursehub.db.base import Base
from coursehub.models.user import User
from coursehub.models.course import Course, Video, Enrollment
from coursehub.models.video_progress import VideoProgress
from coursehub.models.rating import Rating
from coursehub.models.review import Review, ReviewReply, ReviewHelpfulVote
from coursehub.models.comment import Comment, CommentReply, CommentLike

__all__ = [
    "Base", "User", "Course", "Video", "Enrollment", "VideoProgress", "Rating",
    "Review", "ReviewReply", "ReviewHelpfulVote",
    "Comment", "CommentReply", "CommentLike",
]
