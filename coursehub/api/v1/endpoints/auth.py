# coursehub/api/v1/endpoints/auth.py
from datetime import timedelta

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from coursehub.core import security
from coursehub.core.config import settings
from coursehub.core.context import SessionContext
from coursehub.core.deps import get_current_user, get_session_context
from coursehub.db.session import get_db
from coursehub.models.user import User as UserModel
from coursehub.schemas.token import Token
from coursehub.schemas.user import PasswordChange, ProfileUpdate, User, UserRegister
from coursehub.services.user_service import UserService

router = APIRouter()


@router.post("/auth/token", response_model=Token, summary="Autenticación con Email y Contraseña")
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)
):
    user = UserService.authenticate(db, form_data.username, form_data.password)
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = security.create_access_token(
        subject=user.email, expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/auth/register", response_model=User, status_code=status.HTTP_201_CREATED,
             summary="Registro de estudiantes y profesores")
def register(payload: UserRegister, db: Session = Depends(get_db)):
    return UserService.register(
        db,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
        user_type=payload.user_type,
    )


@router.get("/auth/me", response_model=User, summary="Usuario autenticado")
def read_me(current_user: UserModel = Depends(get_current_user)):
    return current_user


@router.put("/auth/me", response_model=User, summary="Actualizar perfil")
def update_me(
    payload: ProfileUpdate,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return UserService.update_profile(
        db, ctx, first_name=payload.first_name, last_name=payload.last_name, bio=payload.bio
    )


@router.post("/auth/me/password", summary="Cambiar contraseña")
def change_password(
    payload: PasswordChange,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    UserService.change_password(db, ctx, payload.current_password, payload.new_password)
    return {"message": "Contraseña actualizada"}
