# coursehub/services/user_service.py
"""
Registro, autenticación, perfil y administración de usuarios.
Las contraseñas solo se comparan contra su hash bcrypt.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from coursehub.core.context import ADMIN, STUDENT, TEACHER, SessionContext, require_context
from coursehub.core.exceptions import (
    AuthenticationRequiredError, ConflictError, EligibilityError, NotFoundError, ValidationError
)
from coursehub.core.security import verify_password
from coursehub.crud import crud_user
from coursehub.models.user import User
from coursehub.utils.formatting import is_valid_email

logger = logging.getLogger("coursehub.users")

PASSWORD_MIN_LENGTH = 3
SELF_SERVICE_USER_TYPES = (STUDENT, TEACHER)
USER_STATUSES = ("active", "suspended")


def _validate_password(password: Optional[str]) -> str:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"La contraseña debe tener al menos {PASSWORD_MIN_LENGTH} caracteres")
    return password


class UserService:

    # ── Cuentas ──

    @staticmethod
    def register(db: Session, first_name: str, last_name: str, email: str, password: str,
                 user_type: str = STUDENT) -> User:
        email = (email or "").strip().lower()
        if not is_valid_email(email):
            raise ValidationError("Email inválido")
        _validate_password(password)
        if user_type not in SELF_SERVICE_USER_TYPES:
            raise ValidationError("Tipo de usuario inválido")
        if not (first_name or "").strip() or not (last_name or "").strip():
            raise ValidationError("Nombre y apellido son obligatorios")

        if crud_user.get_user_by_email(db, email) is not None:
            raise ConflictError("El email ya está registrado. Inicia sesión.")

        user = crud_user.create_user(
            db,
            email=email,
            password=password,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            user_type=user_type,
        )
        logger.info(f"Usuario registrado: {email} ({user_type})")
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> User:
        """
        Raises:
            AuthenticationRequiredError: email o contraseña incorrectos
            EligibilityError: la cuenta está suspendida
        """
        user = crud_user.get_user_by_email(db, (email or "").strip().lower())
        if user is None or not verify_password(password or "", user.hashed_password):
            logger.warning(f"Intento de login fallido para {email}")
            raise AuthenticationRequiredError("Email o contraseña incorrectos")
        if not user.is_active:
            raise EligibilityError("Tu cuenta está suspendida. Contacta al administrador.")
        return user

    @staticmethod
    def update_profile(db: Session, ctx: Optional[SessionContext], first_name: Optional[str] = None,
                       last_name: Optional[str] = None, bio: Optional[str] = None) -> User:
        ctx = require_context(ctx)
        user = UserService._get_user(db, ctx.email)
        fields = {}
        if first_name:
            fields["first_name"] = first_name.strip()
        if last_name:
            fields["last_name"] = last_name.strip()
        if bio is not None:
            fields["bio"] = bio
        if not fields:
            return user
        return crud_user.update_user(db, user, **fields)

    @staticmethod
    def change_password(db: Session, ctx: Optional[SessionContext], current_password: str,
                        new_password: str) -> User:
        ctx = require_context(ctx)
        user = UserService._get_user(db, ctx.email)
        if not verify_password(current_password or "", user.hashed_password):
            raise ValidationError("La contraseña actual es incorrecta")
        _validate_password(new_password)
        return crud_user.set_password(db, user, new_password)

    @staticmethod
    def _get_user(db: Session, email: str) -> User:
        user = crud_user.get_user_by_email(db, email)
        if user is None:
            raise NotFoundError("Usuario no encontrado")
        return user

    # ── Administración ──

    @staticmethod
    def _require_admin(ctx: Optional[SessionContext]) -> SessionContext:
        ctx = require_context(ctx)
        if ctx.user_type != ADMIN:
            raise EligibilityError("Se requieren permisos de administrador")
        return ctx

    @staticmethod
    def list_users(db: Session, ctx: Optional[SessionContext], user_type: Optional[str] = None,
                   status: Optional[str] = None) -> List[User]:
        UserService._require_admin(ctx)
        users = crud_user.get_users(db, user_type=user_type)
        if status:
            users = [user for user in users if user.status == status]
        return users

    @staticmethod
    def set_status(db: Session, ctx: Optional[SessionContext], email: str, status: str) -> User:
        ctx = UserService._require_admin(ctx)
        if status not in USER_STATUSES:
            raise ValidationError(f"Estado inválido: {status}")
        if email == ctx.email:
            raise EligibilityError("No puedes cambiar el estado de tu propia cuenta")
        user = UserService._get_user(db, email)
        logger.info(f"{ctx.email} cambió el estado de {email} a {status}")
        return crud_user.update_user(db, user, status=status)

    @staticmethod
    def suspend_user(db: Session, ctx: Optional[SessionContext], email: str) -> User:
        return UserService.set_status(db, ctx, email, "suspended")

    @staticmethod
    def activate_user(db: Session, ctx: Optional[SessionContext], email: str) -> User:
        return UserService.set_status(db, ctx, email, "active")

    @staticmethod
    def delete_user(db: Session, ctx: Optional[SessionContext], email: str) -> User:
        ctx = UserService._require_admin(ctx)
        if email == ctx.email:
            raise EligibilityError("No puedes eliminar tu propia cuenta")
        user = UserService._get_user(db, email)
        logger.info(f"{ctx.email} eliminó la cuenta {email}")
        return crud_user.delete_user(db, user)
