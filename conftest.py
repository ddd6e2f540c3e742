"""
Fixtures compartidas para las pruebas.
Usa SQLite en memoria; cada prueba parte de tablas vacías.
"""
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="coursehub-logs-"))
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="coursehub-storage-"))

import pytest
from fastapi.testclient import TestClient

from coursehub.core.context import SessionContext
from coursehub.core.security import create_access_token, get_password_hash
from coursehub.crud import crud_course
from coursehub.db.models_registry import Base, User
from coursehub.db.session import SessionLocal, engine, get_db
from coursehub.services.storage_service import StorageService

TEST_PASSWORD = "secret123"
# bcrypt es lento a propósito: un solo hash para todos los usuarios de prueba
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


def make_user(db, email, first_name, last_name, user_type, status="active"):
    user = User(
        email=email,
        hashed_password=TEST_PASSWORD_HASH,
        first_name=first_name,
        last_name=last_name,
        user_type=user_type,
        bio="",
        status=status,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(email):
    return {"Authorization": f"Bearer {create_access_token(subject=email)}"}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def student(db):
    return make_user(db, "sofia.student@example.com", "Sofia", "Ruiz", "student")


@pytest.fixture
def student2(db):
    return make_user(db, "mateo.student@example.com", "Mateo", "Lopez", "student")


@pytest.fixture
def teacher(db):
    return make_user(db, "tomas.teacher@example.com", "Tomas", "Vega", "teacher")


@pytest.fixture
def teacher2(db):
    return make_user(db, "tania.teacher@example.com", "Tania", "Mora", "teacher")


@pytest.fixture
def admin(db):
    return make_user(db, "ada.admin@example.com", "Ada", "Campos", "admin")


@pytest.fixture
def student_ctx(student):
    return SessionContext.from_user(student)


@pytest.fixture
def student2_ctx(student2):
    return SessionContext.from_user(student2)


@pytest.fixture
def teacher_ctx(teacher):
    return SessionContext.from_user(teacher)


@pytest.fixture
def teacher2_ctx(teacher2):
    return SessionContext.from_user(teacher2)


@pytest.fixture
def admin_ctx(admin):
    return SessionContext.from_user(admin)


@pytest.fixture
def course(db, teacher):
    """
    Curso publicado del profesor con dos videos de 100s y 200s.
    """
    db_course = crud_course.create_course(
        db,
        title="Python desde Cero",
        description="Fundamentos de Python con ejercicios",
        category="Programming",
        level="Beginner",
        thumbnail="🐍",
        creator_email=teacher.email,
        creator_name="Tomas Vega",
        published=True,
    )
    crud_course.add_video(db, db_course.id, id="video_a", name="Introducción", duration_seconds=100)
    crud_course.add_video(db, db_course.id, id="video_b", name="Variables", duration_seconds=200)
    db.refresh(db_course)
    return db_course


@pytest.fixture
def storage(tmp_path):
    return StorageService(
        root=str(tmp_path / "storage"),
        bucket="course-videos",
        public_base_url="http://testserver/storage/v1/object/public",
    )


@pytest.fixture
def client(db, storage):
    from coursehub.api.v1.endpoints import courses
    from coursehub.main import app
    from coursehub.services.course_service import CourseService

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[courses.get_course_service] = lambda: CourseService(db, storage=storage)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
