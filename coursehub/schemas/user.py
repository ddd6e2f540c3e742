from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class UserRegister(BaseModel):
    """
    Schema para el registro público. Solo estudiantes y profesores.
    """
    first_name: str
    last_name: str
    email: str
    password: str
    user_type: Literal["student", "teacher"] = "student"


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str


class UserStatusUpdate(BaseModel):
    status: Literal["active", "suspended"]


class User(BaseModel):
    """
    Schema para devolver un usuario. Nunca incluye el hash de la contraseña.
    """
    email: str
    first_name: str
    last_name: str
    user_type: str
    bio: str = ""
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
