from typing import List, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from coursehub.core.security import get_password_hash
from coursehub.models.user import User
from decorators.store_logging import store_operation


@store_operation("select", "users")
def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """
    Obtiene un usuario por su email.
    """
    return db.query(User).filter(User.email == email).first()


@store_operation("insert", "users")
def create_user(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    user_type: str = "student",
    bio: str = "",
) -> User:
    """
    Crea un usuario guardando solo el hash bcrypt de la contraseña.
    """
    db_user = User(
        email=email,
        hashed_password=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        user_type=user_type,
        bio=bio,
        status="active",
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


@store_operation("update", "users")
def update_user(db: Session, db_user: User, **fields) -> User:
    for field, value in fields.items():
        setattr(db_user, field, value)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


@store_operation("update", "users")
def set_password(db: Session, db_user: User, new_password: str) -> User:
    db_user.hashed_password = get_password_hash(new_password)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


@store_operation("select", "users")
def get_users(db: Session, user_type: Optional[str] = None) -> List[User]:
    """
    Lista usuarios, del más reciente al más antiguo, opcionalmente por tipo.
    """
    query = db.query(User)
    if user_type:
        query = query.filter(User.user_type == user_type)
    return query.order_by(desc(User.created_at), desc(User.id)).all()


@store_operation("select", "users")
def count_users_by_type(db: Session) -> dict:
    rows = db.query(User.user_type, func.count(User.id)).group_by(User.user_type).all()
    return {user_type: count for user_type, count in rows}


@store_operation("select", "users")
def count_users_by_status(db: Session) -> dict:
    rows = db.query(User.status, func.count(User.id)).group_by(User.status).all()
    return {status: count for status, count in rows}


@store_operation("delete", "users")
def delete_user(db: Session, db_user: User) -> User:
    db.delete(db_user)
    db.commit()
    return db_user
