from datetime import datetime
from typing import List

from pydantic import BaseModel, computed_field

from coursehub.utils.formatting import format_relative_date


class CommentCreate(BaseModel):
    content: str


class CommentReply(BaseModel):
    reply_id: str
    user_email: str
    user_name: str
    user_initials: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class Comment(BaseModel):
    comment_id: str
    course_id: int
    user_email: str
    user_name: str
    user_initials: str
    user_type: str
    content: str
    likes: int
    edited: bool
    created_at: datetime
    replies: List[CommentReply] = []

    @computed_field
    @property
    def created_label(self) -> str:
        return format_relative_date(self.created_at)

    class Config:
        from_attributes = True


class LikeResult(BaseModel):
    comment_id: str
    liked: bool
    likes: int
