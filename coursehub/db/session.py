# coursehub/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coursehub.core.config import settings


def build_engine(database_uri: str, echo: bool = False):
    """
    Crea el motor de SQLAlchemy. Para SQLite en memoria se usa StaticPool
    para que todas las conexiones compartan la misma base.
    """
    if database_uri.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_uri:
            kwargs["poolclass"] = StaticPool
        return create_engine(database_uri, echo=echo, **kwargs)
    return create_engine(database_uri, echo=echo, pool_pre_ping=True)


# Se crea el motor (engine) de SQLAlchemy usando la URI de la configuración.
engine = build_engine(settings.DATABASE_URI, echo=settings.DATABASE_ECHO)

# Se crea una fábrica de sesiones que se usará para crear sesiones individuales.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Función generadora para obtener instancias de base de datos
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
