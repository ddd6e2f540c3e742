from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from coursehub.core.context import SessionContext
from coursehub.core.security import decode_access_token
from coursehub.crud.crud_user import get_user_by_email
from coursehub.db.session import get_db
from coursehub.models.user import User
from coursehub.schemas.token import TokenPayload

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme)
) -> User:
    """
    Dependencia para obtener el usuario actual desde el token JWT.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    email = decode_access_token(token)
    if email is None:
        raise credentials_exception
    token_data = TokenPayload(sub=email)

    user = get_user_by_email(db, email=token_data.sub)
    if user is None:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cuenta suspendida")
    return user


def get_session_context(user: User = Depends(get_current_user)) -> SessionContext:
    """
    Contexto de sesión explícito que se pasa a los servicios.
    """
    return SessionContext.from_user(user)


def require_role(*roles: str):
    """
    Fábrica de dependencias que restringe el endpoint a ciertos tipos de usuario.
    """
    def checker(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
        if ctx.user_type not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="No tienes permisos para esta acción",
            )
        return ctx
    return checker


optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def get_optional_session_context(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(optional_oauth2_scheme),
) -> Optional[SessionContext]:
    """
    Contexto de sesión si hay un token válido; None para visitantes.
    """
    if not token:
        return None
    email = decode_access_token(token)
    if email is None:
        return None
    user = get_user_by_email(db, email=email)
    if user is None or not user.is_active:
        return None
    return SessionContext.from_user(user)
