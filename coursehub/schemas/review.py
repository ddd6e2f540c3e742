from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, computed_field

from coursehub.schemas.rating import RatingDistribution
from coursehub.utils.formatting import format_relative_date


class ReviewCreate(BaseModel):
    content: str


class ReviewUpdate(BaseModel):
    content: str


class ReplyCreate(BaseModel):
    content: str


class ReviewReply(BaseModel):
    reply_id: str
    user_email: str
    user_name: str
    user_initials: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class Review(BaseModel):
    review_id: str
    course_id: int
    user_email: str
    user_name: str
    user_initials: str
    user_type: str
    content: str
    rating: int
    helpful_up: int
    helpful_down: int
    edited: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    replies: List[ReviewReply] = []

    @computed_field
    @property
    def created_label(self) -> str:
        return format_relative_date(self.created_at)

    class Config:
        from_attributes = True


class HelpfulVote(BaseModel):
    vote: Literal["up", "down"]


class HelpfulVoteResult(BaseModel):
    review_id: str
    helpful_up: int
    helpful_down: int
    user_vote: Optional[str] = None


class ReviewStats(BaseModel):
    total: int
    average: float
    distribution: RatingDistribution

    class Config:
        from_attributes = True


class ReviewEligibility(BaseModel):
    can_write_review: bool
    has_rating: bool
