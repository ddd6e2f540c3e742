# coursehub/models/user.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime

from coursehub.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Usuario de la plataforma. user_type: student | teacher | admin.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    user_type = Column(String(20), nullable=False, default="student", index=True)
    bio = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self):
        return f"<User(email='{self.email}', user_type='{self.user_type}', status='{self.status}')>"
