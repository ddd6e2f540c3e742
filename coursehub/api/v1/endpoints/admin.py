# coursehub/api/v1/endpoints/admin.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursehub.core.context import ADMIN, SessionContext
from coursehub.core.deps import require_role
from coursehub.db.session import get_db
from coursehub.schemas.user import User, UserStatusUpdate
from coursehub.services.user_service import UserService

router = APIRouter()


@router.get("/users", response_model=List[User], summary="Listar usuarios")
def read_users(
    user_type: Optional[str] = None,
    status: Optional[str] = None,
    ctx: SessionContext = Depends(require_role(ADMIN)),
    db: Session = Depends(get_db),
):
    return UserService.list_users(db, ctx, user_type=user_type, status=status)


@router.put("/users/{email}/status", response_model=User, summary="Suspender o reactivar usuario")
def update_user_status(
    email: str,
    payload: UserStatusUpdate,
    ctx: SessionContext = Depends(require_role(ADMIN)),
    db: Session = Depends(get_db),
):
    return UserService.set_status(db, ctx, email, payload.status)


@router.delete("/users/{email}", summary="Eliminar usuario")
def delete_user(
    email: str,
    ctx: SessionContext = Depends(require_role(ADMIN)),
    db: Session = Depends(get_db),
):
    UserService.delete_user(db, ctx, email)
    return {"message": "Usuario eliminado", "email": email}
