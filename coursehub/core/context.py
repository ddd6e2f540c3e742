# coursehub/core/context.py
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from coursehub.core.exceptions import AuthenticationRequiredError
from coursehub.utils.formatting import display_name, initials

if TYPE_CHECKING:
    from coursehub.models.user import User

STUDENT = "student"
TEACHER = "teacher"
ADMIN = "admin"
USER_TYPES = (STUDENT, TEACHER, ADMIN)


@dataclass(frozen=True)
class SessionContext:
    """
    Identidad del usuario que ejecuta una operación.
    Se construye por petición a partir del usuario autenticado y se pasa
    explícitamente a cada servicio.
    """
    email: str
    first_name: str
    last_name: str
    user_type: str

    @classmethod
    def from_user(cls, user: "User") -> "SessionContext":
        return cls(
            email=user.email,
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            user_type=user.user_type,
        )

    @property
    def display_name(self) -> str:
        return display_name(self.first_name, self.last_name)

    @property
    def initials(self) -> str:
        return initials(self.first_name, self.last_name)

    @property
    def is_student(self) -> bool:
        return self.user_type == STUDENT

    @property
    def is_teacher(self) -> bool:
        return self.user_type == TEACHER

    @property
    def is_admin(self) -> bool:
        return self.user_type == ADMIN


def require_context(ctx: Optional[SessionContext]) -> SessionContext:
    """Falla con AuthenticationRequiredError si no hay sesión."""
    if ctx is None:
        raise AuthenticationRequiredError("Debe iniciar sesión para realizar esta acción")
    return ctx
