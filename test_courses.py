"""
Pruebas de cursos, videos, inscripciones, almacén de objetos y catálogo.
"""
import os

import pytest

from coursehub.core.config import settings
from coursehub.core.exceptions import (
    ConflictError, EligibilityError, NotFoundError, StoreError, ValidationError,
)
from coursehub.crud import crud_course
from coursehub.services.catalog_service import CatalogService
from coursehub.services.course_service import CourseService
from coursehub.services.storage_service import build_video_path

VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42"


def stored_files(storage):
    found = []
    for dirpath, _, filenames in os.walk(storage.bucket_dir):
        found.extend(os.path.join(dirpath, name) for name in filenames)
    return found


# ── Almacén de objetos ──

def test_build_video_path():
    path = build_video_path("sofia.student@example.com", "video_1", "Clase 1.mp4")
    assert path == "sofia_student_at_example_com/video_1_clase_1.mp4"


def test_storage_upload_read_remove(storage):
    path = "carpeta/archivo.mp4"
    storage.upload(path, VIDEO_BYTES)

    assert storage.exists(path)
    assert storage.read(path) == VIDEO_BYTES
    url = storage.get_public_url(path)
    assert url == "http://testserver/storage/v1/object/public/course-videos/carpeta/archivo.mp4"
    assert storage.path_from_public_url(url) == path
    assert storage.path_from_public_url("https://otro.cdn/archivo.mp4") is None

    assert storage.remove(path) is True
    assert storage.remove(path) is False
    with pytest.raises(NotFoundError):
        storage.read(path)


def test_storage_does_not_overwrite(storage):
    storage.upload("a/b.mp4", VIDEO_BYTES)
    with pytest.raises(ConflictError):
        storage.upload("a/b.mp4", b"otro")
    assert storage.read("a/b.mp4") == VIDEO_BYTES


def test_storage_rejects_paths_outside_bucket(storage):
    with pytest.raises(ValidationError):
        storage.upload("../fuera.mp4", VIDEO_BYTES)


# ── Cursos ──

def test_create_course_applies_defaults(db, teacher_ctx, storage):
    course = CourseService(db, storage).create_course(teacher_ctx, {"title": "   "})
    assert course.title == "Untitled Course"
    assert course.category == "General"
    assert course.level == "Beginner"
    assert course.thumbnail == "📚"
    assert course.creator_email == teacher_ctx.email
    assert course.creator_name == "Tomas Vega"


def test_only_teachers_create_courses(db, student_ctx, storage):
    with pytest.raises(EligibilityError):
        CourseService(db, storage).create_course(student_ctx, {"title": "Mi curso"})


def test_update_course_owner_or_admin(db, course, teacher_ctx, teacher2_ctx, admin_ctx, storage):
    service = CourseService(db, storage)
    with pytest.raises(EligibilityError):
        service.update_course(course.id, teacher2_ctx, {"title": "Robado"})

    updated = service.update_course(course.id, teacher_ctx, {"title": "Python Avanzado", "level": "Advanced"})
    assert updated.title == "Python Avanzado"
    assert updated.level == "Advanced"

    updated = service.update_course(course.id, admin_ctx, {"published": False})
    assert updated.published is False

    with pytest.raises(ValidationError):
        service.update_course(course.id, teacher_ctx, {"title": "  "})


def test_update_course_reorders_and_drops_videos(db, course, teacher_ctx, storage):
    service = CourseService(db, storage)
    service.update_course(course.id, teacher_ctx, {"video_ids": ["video_b", "video_a"]})
    videos = crud_course.get_videos(db, course.id)
    assert [(v.id, v.position) for v in videos] == [("video_b", 0), ("video_a", 1)]
    assert videos[0].duration_seconds == 200

    service.update_course(course.id, teacher_ctx, {"video_ids": ["video_a"]})
    assert [(v.id, v.position) for v in crud_course.get_videos(db, course.id)] == [("video_a", 0)]

    with pytest.raises(ValidationError):
        service.update_course(course.id, teacher_ctx, {"video_ids": ["video_a", "video_x"]})
    with pytest.raises(ValidationError):
        service.update_course(course.id, teacher_ctx, {"video_ids": ["video_a", "video_a"]})


def test_get_missing_course(db, storage):
    with pytest.raises(NotFoundError):
        CourseService(db, storage).get_course(9999)


def test_delete_course_removes_files_and_children(db, teacher_ctx, student_ctx, storage):
    service = CourseService(db, storage)
    course = service.create_course(teacher_ctx, {"title": "Temporal"})
    service.add_video(course.id, teacher_ctx, "clase.mp4", "video/mp4", VIDEO_BYTES, 61.6)
    service.enroll(student_ctx, course.id)
    assert len(stored_files(storage)) == 1

    with pytest.raises(EligibilityError):
        service.delete_course(course.id, student_ctx)
    service.delete_course(course.id, teacher_ctx)

    assert stored_files(storage) == []
    assert crud_course.get_course(db, course.id) is None
    assert crud_course.get_videos(db, course.id) == []
    assert crud_course.count_enrollments(db, course_id=course.id) == 0


# ── Videos ──

def test_add_video_uploads_and_appends(db, course, teacher_ctx, storage):
    video = CourseService(db, storage).add_video(
        course.id, teacher_ctx, "Clase 3.mp4", "video/mp4", VIDEO_BYTES, 61.6, name="Funciones"
    )
    assert video.id.startswith("video_")
    assert video.name == "Funciones"
    assert video.position == 2
    assert video.duration_seconds == 62
    assert video.size_bytes == len(VIDEO_BYTES)
    assert video.storage_path.endswith("_clase_3.mp4")
    assert video.video_url == storage.get_public_url(video.storage_path)
    assert storage.read(video.storage_path) == VIDEO_BYTES


def test_add_video_keeps_sub_second_duration(db, course, teacher_ctx, storage):
    video = CourseService(db, storage).add_video(
        course.id, teacher_ctx, "intro.mp4", "video/mp4", VIDEO_BYTES, 0.4
    )
    assert video.duration_seconds == 0.4


@pytest.mark.parametrize("content_type, duration", [
    ("image/png", 10),
    ("video/mp4", 0),
    ("video/mp4", None),
])
def test_add_video_validation(db, course, teacher_ctx, storage, content_type, duration):
    with pytest.raises(ValidationError):
        CourseService(db, storage).add_video(
            course.id, teacher_ctx, "clase.mp4", content_type, VIDEO_BYTES, duration
        )
    assert stored_files(storage) == []


def test_add_video_size_limit(db, course, teacher_ctx, storage, monkeypatch):
    monkeypatch.setattr(settings, "MAX_VIDEO_SIZE_BYTES", 4)
    with pytest.raises(ValidationError):
        CourseService(db, storage).add_video(
            course.id, teacher_ctx, "clase.mp4", "video/mp4", VIDEO_BYTES, 10
        )


def test_add_video_only_by_owner(db, course, teacher2_ctx, storage):
    with pytest.raises(EligibilityError):
        CourseService(db, storage).add_video(
            course.id, teacher2_ctx, "clase.mp4", "video/mp4", VIDEO_BYTES, 10
        )


def test_add_video_cleans_up_file_when_store_fails(db, course, teacher_ctx, storage, monkeypatch):
    def failing_add_video(*args, **kwargs):
        raise StoreError("almacén caído")

    monkeypatch.setattr(crud_course, "add_video", failing_add_video)
    with pytest.raises(StoreError):
        CourseService(db, storage).add_video(
            course.id, teacher_ctx, "clase.mp4", "video/mp4", VIDEO_BYTES, 10
        )
    assert stored_files(storage) == []


def test_remove_video_compacts_positions(db, course, teacher_ctx, storage):
    service = CourseService(db, storage)
    added = service.add_video(course.id, teacher_ctx, "extra.mp4", "video/mp4", VIDEO_BYTES, 30)

    service.remove_video(course.id, "video_a", teacher_ctx)
    assert [(v.id, v.position) for v in crud_course.get_videos(db, course.id)] == \
        [("video_b", 0), (added.id, 1)]

    service.remove_video(course.id, added.id, teacher_ctx)
    assert stored_files(storage) == []

    with pytest.raises(NotFoundError):
        service.remove_video(course.id, "video_a", teacher_ctx)


# ── Inscripciones ──

def test_enroll_is_idempotent(db, course, student_ctx, storage):
    service = CourseService(db, storage)
    assert service.enroll(student_ctx, course.id) == (True, False)
    assert service.enroll(student_ctx, course.id) == (True, True)
    assert service.is_enrolled(student_ctx.email, course.id)
    assert [c.id for c in service.user_courses(student_ctx.email)] == [course.id]

    assert service.unenroll(student_ctx, course.id) is True
    assert service.unenroll(student_ctx, course.id) is False
    assert service.user_courses(student_ctx.email) == []


def test_cannot_enroll_in_own_or_missing_course(db, course, teacher_ctx, student_ctx, storage):
    service = CourseService(db, storage)
    with pytest.raises(EligibilityError):
        service.enroll(teacher_ctx, course.id)
    with pytest.raises(NotFoundError):
        service.enroll(student_ctx, 9999)


def test_created_courses(db, course, teacher_ctx, teacher2_ctx, storage):
    service = CourseService(db, storage)
    assert [c.id for c in service.created_courses(teacher_ctx.email)] == [course.id]
    assert service.created_courses(teacher2_ctx.email) == []


# ── Catálogo ──

@pytest.fixture
def catalog(db, course, teacher2):
    crud_course.create_course(
        db, title="Diseño UX", description="Investigación con usuarios", category="Design",
        creator_email=teacher2.email, creator_name="Tania Mora",
    )
    crud_course.create_course(
        db, title="Python en borrador", category="Programming",
        creator_email=teacher2.email, creator_name="Tania Mora", published=False,
    )
    return CatalogService(db)


@pytest.mark.parametrize("query, expected", [
    ("python", ["Python desde Cero"]),
    ("EJERCICIOS", ["Python desde Cero"]),
    ("tania", ["Diseño UX"]),
    ("design", ["Diseño UX"]),
    ("sin coincidencias", []),
])
def test_search_matches_published_courses(catalog, query, expected):
    assert [entry.course.title for entry in catalog.search(query)] == expected


def test_search_by_category_and_entry_fields(db, catalog, course, student):
    crud_course.create_enrollment(db, student.email, course.id)
    entries = catalog.search("", category="Programming", user_email=student.email)

    assert len(entries) == 1
    entry = entries[0]
    assert entry.course.id == course.id
    assert entry.video_count == 2
    assert entry.rating_count == 0
    assert entry.average_rating == 0
    assert entry.enrolled

    assert len(catalog.search()) == 2
    assert catalog.search("", category="Music") == []


def test_recommended_excludes_enrolled_and_own(db, catalog, course, student_ctx, teacher2_ctx):
    assert {e.course.title for e in catalog.recommended(student_ctx)} == {"Python desde Cero", "Diseño UX"}

    crud_course.create_enrollment(db, student_ctx.email, course.id)
    assert [e.course.title for e in catalog.recommended(student_ctx)] == ["Diseño UX"]
    assert [e.course.title for e in catalog.recommended(teacher2_ctx)] == ["Python desde Cero"]


def test_categories(catalog):
    assert catalog.categories() == ["Design", "Programming"]


def test_search_degrades_to_empty_on_store_error(catalog, monkeypatch):
    def failing(*args, **kwargs):
        raise StoreError("almacén caído")

    monkeypatch.setattr(crud_course, "search_courses", failing)
    assert catalog.search("python") == []
